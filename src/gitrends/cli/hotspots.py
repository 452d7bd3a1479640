"""Hotspot, ownership and commit spread commands."""

from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from . import app
from ._common import console, get_config, get_engine, print_json, reporting_errors


@app.command()
def hotspots(
    ctx: typer.Context,
    modules: bool = typer.Option(False, "--modules", "-m", help="Rank modules instead of files"),
    count: Optional[int] = typer.Option(
        None, "--count", "-n", help="Maximum number of entries to show", min=1
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Files (or modules) ranked by how often they change.

    [bold cyan]Examples:[/bold cyan]

      gitrends hotspots --count 20

      gitrends hotspots --modules --json
    """
    limit = count or get_config(ctx).max_entries
    with reporting_errors():
        engine = get_engine(ctx)
        entries = engine.module_hotspots(limit) if modules else engine.file_hotspots(limit)

    if json_output:
        print_json([entry.to_dict() for entry in entries])
        return

    table = Table(title="Module hotspots" if modules else "Hotspots", pad_edge=True)
    table.add_column("Module" if modules else "File", style="bold")
    table.add_column("Revisions", justify="right", style="yellow")
    table.add_column("Authors", justify="right")
    table.add_column("Code lines", justify="right", style="cyan")
    table.add_column("Indent", justify="right")
    for entry in entries:
        table.add_row(
            escape(entry.name),
            str(entry.num_revisions),
            str(entry.num_authors),
            str(entry.num_code_lines),
            str(entry.total_indent_levels),
        )
    console.print(table)


@app.command("main-developer")
def main_developer(
    ctx: typer.Context,
    modules: bool = typer.Option(False, "--modules", "-m", help="Report modules instead of files"),
    count: Optional[int] = typer.Option(
        None, "--count", "-n", help="Maximum number of entries to show", min=1
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Author with the largest share of net added lines per file (or module)."""
    limit = count or get_config(ctx).max_entries
    with reporting_errors():
        engine = get_engine(ctx)
        entries = engine.modules_main_developer(limit) if modules else engine.files_main_developer(limit)

    if json_output:
        print_json([entry.to_dict() for entry in entries])
        return

    table = Table(title="Main developers", pad_edge=True)
    table.add_column("Module" if modules else "File", style="bold")
    table.add_column("Main developer", style="green")
    table.add_column("Net added", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Share", justify="right", style="yellow")
    for entry in entries:
        table.add_row(
            escape(entry.name),
            escape(entry.main_developer),
            str(entry.main_developer_net_added_lines),
            str(entry.total_net_added_lines),
            f"{entry.ownership_ratio:.0%}",
        )
    console.print(table)


@app.command("commit-spread")
def commit_spread(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Revisions per author in each module."""
    with reporting_errors():
        entries = get_engine(ctx).commit_spread()

    if json_output:
        print_json([entry.to_dict() for entry in entries])
        return

    table = Table(title="Commit spread", pad_edge=True)
    table.add_column("Module", style="bold")
    table.add_column("Author", style="green")
    table.add_column("Revisions", justify="right", style="yellow")
    for entry in entries:
        table.add_row(escape(entry.module), escape(entry.author), str(entry.num_revisions))
    console.print(table)

"""Change coupling commands."""

from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from . import app
from ._common import console, get_config, get_engine, print_json, reporting_errors


@app.command()
def coupling(
    ctx: typer.Context,
    modules: bool = typer.Option(False, "--modules", "-m", help="Couple modules instead of files"),
    name: Optional[str] = typer.Option(
        None, "--name", help="Only show the partners of this file or module"
    ),
    count: Optional[int] = typer.Option(
        None, "--count", "-n", help="Maximum number of entries to show", min=1
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Pairs of files (or modules) that change in the same revisions.

    The coupling ratio is the number of shared revisions divided by the
    average revision count of both sides.

    [bold cyan]Examples:[/bold cyan]

      gitrends coupling --count 30

      gitrends coupling --name src/main.rs

      gitrends coupling --modules --json
    """
    limit = count or get_config(ctx).max_entries
    with reporting_errors():
        engine = get_engine(ctx)
        if name is not None:
            edges = (
                engine.module_couplings_for(name, limit)
                if modules
                else engine.file_couplings_for(name, limit)
            )
        else:
            edges = engine.module_couplings(limit) if modules else engine.file_couplings(limit)

    if json_output:
        print_json([edge.to_dict() for edge in edges])
        return

    table = Table(title="Change coupling", pad_edge=True)
    table.add_column("Left", style="bold")
    table.add_column("Right", style="bold")
    table.add_column("Coupled", justify="right", style="yellow")
    table.add_column("Ratio", justify="right", style="cyan")
    table.add_column("Left revs", justify="right")
    table.add_column("Right revs", justify="right")
    for edge in edges:
        table.add_row(
            escape(edge.left_name),
            escape(edge.right_name),
            str(edge.coupled_revisions),
            f"{edge.coupling_ratio:.1%}",
            str(edge.num_left_revisions),
            str(edge.num_right_revisions),
        )
    console.print(table)


@app.command("sum-of-couplings")
def sum_of_couplings(
    ctx: typer.Context,
    modules: bool = typer.Option(False, "--modules", "-m", help="Rank modules instead of files"),
    count: Optional[int] = typer.Option(
        None, "--count", "-n", help="Maximum number of entries to show", min=1
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Total coupled revisions of each file (or module) across all partners."""
    limit = count or get_config(ctx).max_entries
    with reporting_errors():
        engine = get_engine(ctx)
        entries = engine.module_sum_of_couplings(limit) if modules else engine.file_sum_of_couplings(limit)

    if json_output:
        print_json([entry.to_dict() for entry in entries])
        return

    table = Table(title="Sum of couplings", pad_edge=True)
    table.add_column("Module" if modules else "File", style="bold")
    table.add_column("Sum of couplings", justify="right", style="yellow")
    for entry in entries:
        table.add_row(escape(entry.name), str(entry.sum_of_couplings))
    console.print(table)

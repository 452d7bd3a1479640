"""Overview commands - summary, commit log, files, modules, file history."""

from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from . import app
from ._common import (
    console,
    format_date,
    format_float,
    get_config,
    get_engine,
    print_json,
    reporting_errors,
)

_COUNT_HELP = "Maximum number of entries to show"


@app.command()
def summary(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Revisions, time span, size and most active authors of the indexed history."""
    config = get_config(ctx)
    with reporting_errors():
        result = get_engine(ctx).summary(top_authors=config.top_authors)

    if json_output:
        print_json(result.to_dict())
        return

    console.print()
    console.print(f"[bold]Revisions:[/bold]    {result.num_revisions}")
    console.print(
        f"[bold]Time span:[/bold]    {format_date(result.first_commit)} - {format_date(result.last_commit)}"
    )
    console.print(f"[bold]Code lines:[/bold]   {result.num_code_lines}")
    console.print(f"[bold]Files:[/bold]        {result.num_files}")
    console.print(f"[bold]Modules:[/bold]      {result.num_modules}")

    if result.top_authors:
        table = Table(title="Top authors", pad_edge=True)
        table.add_column("Author", style="bold")
        table.add_column("Revisions", justify="right", style="yellow")
        for author in result.top_authors:
            table.add_row(escape(author.name), str(author.num_revisions))
        console.print()
        console.print(table)
    console.print()


@app.command()
def log(
    ctx: typer.Context,
    count: Optional[int] = typer.Option(None, "--count", "-n", help=_COUNT_HELP, min=1),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Commit log in date order."""
    with reporting_errors():
        entries = get_engine(ctx).commit_log()
    if count is not None:
        entries = entries[-count:]

    if json_output:
        print_json([entry.to_dict() for entry in entries])
        return

    table = Table(title="Commit log", pad_edge=True)
    table.add_column("Revision", style="cyan")
    table.add_column("Date", style="green")
    table.add_column("Author", style="bold")
    table.add_column("Message")
    for entry in entries:
        first_line = entry.commit_message.strip().splitlines()[0] if entry.commit_message.strip() else ""
        table.add_row(
            escape(entry.revision), format_date(entry.date), escape(entry.author), escape(first_line)
        )
    console.print(table)


@app.command()
def files(
    ctx: typer.Context,
    count: Optional[int] = typer.Option(None, "--count", "-n", help=_COUNT_HELP, min=1),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Latest line statistics of every file, largest first."""
    config = get_config(ctx)
    with reporting_errors():
        entries = get_engine(ctx).files(count or config.max_entries)

    if json_output:
        print_json([entry.to_dict() for entry in entries])
        return

    table = Table(title="Files", pad_edge=True)
    table.add_column("File", style="bold")
    table.add_column("Code", justify="right", style="yellow")
    table.add_column("Comment", justify="right")
    table.add_column("Blank", justify="right")
    table.add_column("Indent", justify="right")
    table.add_column("Avg indent", justify="right")
    table.add_column("Indent var.", justify="right")
    for entry in entries:
        table.add_row(
            escape(entry.file_name),
            str(entry.num_code_lines),
            str(entry.num_comment_lines),
            str(entry.num_blank_lines),
            str(entry.total_indent_levels),
            format_float(entry.avg_indent_levels),
            format_float(entry.std_indent_level),
        )
    console.print(table)


@app.command()
def modules(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="List the files of one module"),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Modules and the files assigned to them."""
    with reporting_errors():
        engine = get_engine(ctx)
        if name is not None:
            module_files = engine.module_files(name)
            if json_output:
                print_json(module_files)
            else:
                for file_name in module_files:
                    console.print(file_name, markup=False, highlight=False)
            return
        entries = engine.modules()

    if json_output:
        print_json([entry.to_dict() for entry in entries])
        return

    table = Table(title="Modules", pad_edge=True)
    table.add_column("Module", style="bold")
    table.add_column("Files", justify="right", style="yellow")
    for entry in entries:
        table.add_row(escape(entry.name), str(len(entry.files)))
    console.print(table)


@app.command()
def history(
    ctx: typer.Context,
    file_name: str = typer.Argument(..., help="Repository-relative file path"),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Line statistics of one file at every revision that touched it."""
    with reporting_errors():
        entries = get_engine(ctx).file_history(file_name)

    if json_output:
        print_json([entry.to_dict() for entry in entries])
        return

    if not entries:
        console.print(f"[yellow]No history for {escape(file_name)}.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=escape(file_name), pad_edge=True)
    table.add_column("Revision", style="cyan")
    table.add_column("Date", style="green")
    table.add_column("Code", justify="right", style="yellow")
    table.add_column("Comment", justify="right")
    table.add_column("Blank", justify="right")
    table.add_column("Indent", justify="right")
    table.add_column("+/-", justify="right")
    for entry in entries:
        table.add_row(
            escape(entry.revision),
            format_date(entry.date),
            str(entry.num_code_lines),
            str(entry.num_comment_lines),
            str(entry.num_blank_lines),
            str(entry.total_indent_levels),
            f"+{entry.num_added_lines}/-{entry.num_removed_lines}",
        )
    console.print(table)

"""Index command - build the commit log and file entries tables."""

from contextlib import nullcontext

import typer
from rich.markup import escape

from ..indexing import try_index_repository
from . import app
from ._common import console, get_config, print_json, reporting_errors


@app.command()
def index(
    ctx: typer.Context,
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Re-index even if both tables already exist",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Walk the history reachable from HEAD and write git_log.parquet and
    git_file_entries.parquet to the data directory.

    An existing index is kept unless [bold]--force[/bold] is given.
    """
    config = get_config(ctx)

    with reporting_errors():
        progress = nullcontext() if json_output else console.status("Indexing history...", spinner="dots")
        with progress:
            result = try_index_repository(
                config.source_path,
                config.data_path,
                force=force,
                timeout_seconds=config.git_timeout_seconds,
            )

    if json_output:
        print_json(
            {
                "skipped": result.skipped,
                "num_commits": result.num_commits,
                "num_file_entries": result.num_file_entries,
                "num_ignored_commits": result.num_ignored_commits,
                "head_revision": result.head_revision,
            }
        )
        return

    if result.skipped:
        console.print(
            f"[yellow]Index already present in {escape(str(config.data_path))}.[/yellow] "
            "Use [bold]--force[/bold] to rebuild it."
        )
        return

    console.print(
        f"[green]Indexed[/green] {result.num_commits} commits "
        f"({result.num_file_entries} file entries) at [cyan]{escape(result.head_revision)}[/cyan] "
        f"into [blue]{escape(str(config.data_path))}[/blue]"
    )

"""Global options shared by every subcommand."""

from pathlib import Path
from typing import Optional

import typer

from ..config import load_config
from ..logging_config import setup_logging
from . import app
from ._common import console, reporting_errors


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    source: Optional[Path] = typer.Option(
        None,
        "-C",
        "--source",
        help="Git repository to index (default: current directory)",
        file_okay=False,
        dir_okay=True,
    ),
    data: Optional[Path] = typer.Option(
        None,
        "-d",
        "--data",
        help="Directory for the index tables and rule files (default: .gitrends)",
        file_okay=False,
        dir_okay=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to a file"),
    version: bool = typer.Option(False, "--version", help="Show version and exit", is_eager=True),
):
    """
    Mine a git history into Parquet tables and report on hotspots, change
    coupling, ownership and commit spread.

    Rule files are read from the data directory: [bold]ignore.txt[/bold]
    (one glob per line), [bold]modules.txt[/bold] (pattern => module) and
    [bold]authors.txt[/bold] (alias => author).

    [bold cyan]Examples:[/bold cyan]

      gitrends index

      gitrends -C ~/src/project -d /tmp/project-data hotspots --count 20

      gitrends coupling --modules --json
    """
    if version:
        from .. import __version__

        console.print(f"[bold cyan]gitrends[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)

    with reporting_errors():
        settings = load_config(
            config_file=config,
            source_dir=str(source) if source else None,
            data_dir=str(data) if data else None,
            verbose=verbose,
            quiet=quiet,
        )

    setup_logging(settings.verbosity, log_file=str(log_file) if log_file else None)

    ctx.ensure_object(dict)
    ctx.obj["config"] = settings

"""Range command - show or persist the date range of the active view."""

from typing import Optional

import typer

from ..analytics import DateRange
from . import app
from ._common import console, format_date, get_state, parse_date, print_json, reporting_errors


@app.command("range")
def date_range(
    ctx: typer.Context,
    min_date: Optional[str] = typer.Option(
        None, "--min", help="First day to include (YYYY-MM-DD or epoch seconds)"
    ),
    max_date: Optional[str] = typer.Option(
        None, "--max", help="Last day to include (YYYY-MM-DD or epoch seconds)"
    ),
    clear: bool = typer.Option(False, "--clear", help="Remove both bounds"),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Show the date range every report is restricted to, or change it.

    The range is stored in state.json in the data directory and applies to
    later runs until changed again.

    [bold cyan]Examples:[/bold cyan]

      gitrends range

      gitrends range --min 2023-01-01 --max 2023-12-31

      gitrends range --clear
    """
    with reporting_errors():
        state = get_state(ctx)

        if clear:
            state.set_date_range(DateRange())
        elif min_date is not None or max_date is not None:
            current = state.date_range
            state.set_date_range(
                DateRange(
                    parse_date(min_date) if min_date is not None else current.min_date,
                    parse_date(max_date, end_of_day=True) if max_date is not None else current.max_date,
                )
            )

        selected = state.date_range

    if json_output:
        print_json(selected.to_dict())
        return

    console.print(
        f"[bold]Date range:[/bold] {format_date(selected.min_date) if selected.min_date is not None else 'start'}"
        f" - {format_date(selected.max_date) if selected.max_date is not None else 'now'}"
    )

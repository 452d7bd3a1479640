"""Shared CLI helpers."""

import json
import math
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

import typer
from rich.markup import escape
from rich.console import Console

from ..analytics import AnalyticsEngine, AnalyticsState
from ..config import GitrendsConfig
from ..exceptions import GitrendsError

console = Console()


def get_config(ctx: typer.Context) -> GitrendsConfig:
    return ctx.obj["config"]


def get_state(ctx: typer.Context) -> AnalyticsState:
    """The analytics state for this invocation, created on first use."""
    state = ctx.obj.get("state")
    if state is None:
        state = AnalyticsState(get_config(ctx))
        ctx.obj["state"] = state
    return state


def get_engine(ctx: typer.Context) -> AnalyticsEngine:
    return get_state(ctx).engine


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn gitrends errors into a red one-line message and exit code 1."""
    try:
        yield
    except GitrendsError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)


def print_json(data: Any) -> None:
    """Machine-readable output; NaN becomes null so the result stays valid JSON."""
    print(json.dumps(_json_safe(data), indent=2))


def _json_safe(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def format_date(timestamp: Optional[int]) -> str:
    if timestamp is None:
        return "-"
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def format_float(value: float, digits: int = 2) -> str:
    return "-" if math.isnan(value) else f"{value:.{digits}f}"


def parse_date(value: str, end_of_day: bool = False) -> int:
    """Epoch seconds from either an integer timestamp or an ISO date (UTC).

    A bare date (no time) used as an upper bound covers the whole day.
    """
    value = value.strip()
    if value.lstrip("-").isdigit():
        return int(value)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"expected epoch seconds or YYYY-MM-DD, got {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    timestamp = int(parsed.timestamp())
    if end_of_day and len(value) == 10:
        timestamp += 86399
    return timestamp

"""CLI entry point - registers all subcommands."""

import typer

app = typer.Typer(
    name="gitrends",
    help="gitrends - mine git history and analyze how a codebase evolves",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .callback import main as _main_callback  # noqa: F401, E402
from .index import index as _index  # noqa: F401, E402
from .reports import summary as _summary, log as _log, files as _files  # noqa: F401, E402
from .reports import modules as _modules, history as _history  # noqa: F401, E402
from .hotspots import hotspots as _hotspots, main_developer as _main_developer  # noqa: F401, E402
from .hotspots import commit_spread as _commit_spread  # noqa: F401, E402
from .coupling import coupling as _coupling, sum_of_couplings as _sum_of_couplings  # noqa: F401, E402
from .structure import structure as _structure  # noqa: F401, E402
from .date_range import date_range as _date_range  # noqa: F401, E402


def main() -> None:
    app()

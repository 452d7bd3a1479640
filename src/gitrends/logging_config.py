"""
Logging configuration for gitrends.

Log records go through a rich handler on stderr so that indexing progress and
warnings stay readable next to the report tables printed on stdout. The level
comes from the ``verbosity`` setting, which the config layer has already
merged from files, ``GITRENDS_VERBOSITY`` and the ``-v``/``-q`` flags.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "gitrends"

_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Route gitrends log records to stderr, and optionally to a file.

    Args:
        verbosity: ``quiet`` (errors only), ``normal`` (warnings) or
            ``verbose`` (debug output with source locations and locals in
            tracebacks)
        log_file: Optional file path; records are appended at the same level

    Returns:
        The ``gitrends`` package logger
    """
    try:
        level = _LEVELS[verbosity]
    except KeyError:
        raise ValueError(f"unknown verbosity: {verbosity!r}") from None
    debug = level == logging.DEBUG

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=debug,
            markup=False,
            show_path=debug,
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    # Third-party loggers stay at WARNING; only gitrends follows the verbosity
    logging.basicConfig(
        level=max(level, logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``gitrends`` namespace; module names are prefixed when needed."""
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)

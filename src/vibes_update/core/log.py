"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "vibes_update"


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Route ``vibes_update.*`` loggers to a RichHandler on stderr.

    ``verbose`` lowers the level to DEBUG; ``quiet`` (used for ``--json``)
    keeps only errors so machine output stays clean.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=verbose,
        show_path=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger

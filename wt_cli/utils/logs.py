"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False, quiet: bool = False, no_color: bool = False) -> None:
    """Route package loggers through rich on stderr, keeping stdout for output."""
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logger = logging.getLogger("wt_cli")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    console = Console(stderr=True, no_color=no_color)
    handler = RichHandler(console=console, show_time=False, show_path=verbose, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

"""Logging setup for the CLI."""

import logging

from rich.logging import RichHandler

from wsops.cli.common.output import console


def configure_logging(verbose: bool) -> None:
    """Route wsops library logs through rich (DEBUG when verbose)."""
    logger = logging.getLogger("wsops")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=False, markup=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False

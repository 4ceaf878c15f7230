"""Route the package's log records to the terminal.

Library modules only ever call ``logging.getLogger(__name__)``; handler
and level are decided here, once, from the ``-q``/``-v`` flags.
"""

from __future__ import annotations

import logging
import sys

from bvgrab.cli.console import get_rich_console
from bvgrab.exceptions import EnvironmentError

PACKAGE_LOGGER = "bvgrab"
PLAIN_FORMAT = "%(levelname)s %(name)s: %(message)s"


def level_for(verbosity: int) -> int:
    """Map ``-1``/``0``/``1+`` to WARNING/INFO/DEBUG."""
    if verbosity < 0:
        return logging.WARNING
    if verbosity == 0:
        return logging.INFO
    return logging.DEBUG


def _build_handler() -> logging.Handler:
    try:
        from rich.logging import RichHandler

        rich_console = get_rich_console()
    except (ModuleNotFoundError, EnvironmentError):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        return handler
    return RichHandler(console=rich_console, show_path=False, markup=False)


def configure_logging(verbosity: int) -> logging.Logger:
    """Install a single handler on the ``bvgrab`` logger.

    Calling it again replaces the previous handler instead of stacking.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(_build_handler())
    logger.setLevel(level_for(verbosity))
    return logger

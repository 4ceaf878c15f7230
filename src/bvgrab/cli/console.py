"""CLI console helpers with optional Rich support.

Rich is imported lazily so bootstrap paths (``--help``, ``--version``,
``doctor``) keep working when it is not installed.  One stderr console
is shared by messages, log records and progress bars so their output
does not interleave.
"""

from __future__ import annotations

import functools
import sys
from typing import Any

from bvgrab.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


@functools.cache
def get_rich_console() -> Any:
    """Return the shared Rich console targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain stderr print."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(*objects, file=sys.stderr)
            return
        rich_console.print(*objects)


console = _ConsoleProxy()

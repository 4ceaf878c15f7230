"""Filename helpers shared by the extraction and download layers."""

from __future__ import annotations

# Characters that would split or break a path component.
_UNSAFE_CHARS: dict[str, str] = {
    "/": "|",
    "\\": "|",
    "\0": "",
}

_TRANSLATION = str.maketrans(_UNSAFE_CHARS)


def sanitize_title(title: str) -> str:
    """Return *title* with path-unsafe characters substituted.

    Everything else, including surrounding whitespace, is kept verbatim.
    """
    return title.translate(_TRANSLATION)

"""BeautifulSoup backed page documents.

This module is the **only** place in the codebase that imports ``bs4``.
It satisfies :class:`~bvgrab.core.protocols.PageDocument` and
:class:`~bvgrab.core.protocols.PageElement` structurally.
"""

from __future__ import annotations

from typing import Any

from bvgrab.exceptions import EnvironmentError


def _import_bs4() -> Any:
    """Import bs4 lazily so ``--help`` works without it."""
    try:
        import bs4
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "beautifulsoup4 is not installed. Install with: pip install beautifulsoup4",
        ) from exc
    return bs4


class SoupElement:
    """Wraps one ``bs4.Tag``."""

    def __init__(self, tag: Any) -> None:
        self._tag = tag

    def text(self) -> str:
        """Concatenate every text node below the element, comments excluded.

        Script and style bodies count as text here, unlike
        ``Tag.get_text()`` on an enclosing element.
        """
        bs4 = _import_bs4()
        return "".join(
            str(node)
            for node in self._tag.descendants
            if isinstance(node, bs4.NavigableString) and not isinstance(node, bs4.Comment)
        )


class SoupDocument:
    """A parsed page; selection uses soupsieve CSS selectors."""

    def __init__(self, soup: Any) -> None:
        self._soup = soup

    def select(self, selector: str) -> list[SoupElement]:
        return [SoupElement(tag) for tag in self._soup.select(selector)]


def parse_document(markup: str) -> SoupDocument:
    """Parse *markup* with the stdlib-backed ``html.parser`` builder."""
    bs4 = _import_bs4()
    return SoupDocument(bs4.BeautifulSoup(markup, "html.parser"))

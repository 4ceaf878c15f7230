"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from bvgrab.core.models import QualityTier
from bvgrab.core.syntax import SyntaxNode


class Transport(Protocol):
    """Contract for the HTTP transport collaborator.

    Header, cookie and decompression handling are the implementation's
    business; the core only ever asks for bodies and files.
    """

    async def fetch_body(self, url: str) -> bytes:
        """Return the (decompressed) response body of *url*.

        Raises
        ------
        FetchError
            On any network failure or non-200 response.
        """
        ...  # pragma: no cover

    async def download_to(self, url: str, path: Path) -> None:
        """Stream the body of *url* into *path*, creating parent dirs.

        Raises
        ------
        FetchError
            On any network or storage failure.
        """
        ...  # pragma: no cover


class PageElement(Protocol):
    """A single element of a parsed page."""

    def text(self) -> str:
        """Return the concatenated text content of the element."""
        ...  # pragma: no cover


class PageDocument(Protocol):
    """A parsed page supporting CSS selection in document order."""

    def select(self, selector: str) -> Sequence[PageElement]:
        ...  # pragma: no cover


class DocumentParser(Protocol):
    """Turns decoded page markup into a :class:`PageDocument`."""

    def __call__(self, markup: str) -> PageDocument:
        ...  # pragma: no cover


class ScriptParser(Protocol):
    """Contract for script-source parsers.

    Implementations return a tree of the closed variants defined in
    :mod:`bvgrab.core.syntax`, with spans expressed as character
    offsets into *source*.
    """

    def parse(self, source: str) -> SyntaxNode:
        """Parse *source* as a script program.

        Raises
        ------
        ScriptParseError
            When *source* is not syntactically valid.
        """
        ...  # pragma: no cover


class MediaMerger(Protocol):
    """Contract for the external video/audio muxing step."""

    async def merge(self, video_path: Path, audio_path: Path, output_path: Path) -> None:
        """Copy the video stream, transcode audio, write *output_path*.

        Raises
        ------
        MergeError
            When the merge tool exits non-zero or terminates abnormally.
        """
        ...  # pragma: no cover


class QualityChooser(Protocol):
    """Interactive hook returning the ``index`` of the chosen tier."""

    async def __call__(self, title: str, tiers: Sequence[QualityTier]) -> int:
        ...  # pragma: no cover

"""Infrastructure layer — external system integration.

This layer wraps all interaction with HTTP, HTML and JavaScript
parsing, the filesystem config and ffmpeg.  Every raw third-party
exception must be caught here and re-raised as a
:class:`~bvgrab.exceptions.BvgrabError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Optional-at-import third-party packages (httpx, bs4, tree-sitter) are
  imported lazily inside each adapter; msgspec is imported directly.
"""

from bvgrab.infra.config_loader import load_sess_data
from bvgrab.infra.ffmpeg_detector import FfmpegStatus, detect_ffmpeg, require_ffmpeg
from bvgrab.infra.ffmpeg_merger import FfmpegMerger
from bvgrab.infra.html_document import SoupDocument, SoupElement, parse_document
from bvgrab.infra.http_transport import HttpxTransport
from bvgrab.infra.js_parser import TreeSitterScriptParser

__all__: list[str] = [
    "FfmpegMerger",
    "FfmpegStatus",
    "HttpxTransport",
    "SoupDocument",
    "SoupElement",
    "TreeSitterScriptParser",
    "detect_ffmpeg",
    "load_sess_data",
    "parse_document",
    "require_ffmpeg",
]

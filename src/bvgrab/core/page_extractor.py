"""Page-embedded metadata extraction.

Two strategies locate a ``window.<field>`` payload in a parsed page:

* **Prefix** — the block consists solely of ``window.<field>=<json>``;
  the remainder after the literal prefix is returned untouched.
* **AST** — the assignment sits among other statements; the block is
  parsed and the assigned expression is sliced out by
  :mod:`bvgrab.core.script_locator`.

Both are served by :class:`PageMetadataExtractor`; blocks are tried in
document order and the first success wins.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence

from bvgrab.core.protocols import PageDocument, PageElement, ScriptParser
from bvgrab.core.script_locator import extract_assignment_source
from bvgrab.exceptions import (
    AssignmentNotFoundError,
    MetadataNotFoundError,
    ScriptParseError,
    TitleAmbiguousError,
    TitleMissingError,
)
from bvgrab.utils.naming import sanitize_title

logger = logging.getLogger(__name__)


class ExtractionMode(enum.Enum):
    PREFIX = "prefix"
    AST = "ast"


# Prefix mode accepts any script; AST mode needs executable source only.
_SELECTORS: dict[ExtractionMode, str] = {
    ExtractionMode.PREFIX: "script",
    ExtractionMode.AST: "script:not([type*=json])",
}


class PageMetadataExtractor:
    """Extract the raw JSON text assigned to ``<global>.<field>``.

    Parameters
    ----------
    mode:
        Extraction strategy, see :class:`ExtractionMode`.
    field:
        Property name on the global object, e.g. ``"__playinfo__"``.
    global_name:
        Name of the global object.
    script_parser:
        Required for :attr:`ExtractionMode.AST`.
    """

    def __init__(
        self,
        mode: ExtractionMode,
        field: str,
        *,
        global_name: str = "window",
        script_parser: ScriptParser | None = None,
    ) -> None:
        if mode is ExtractionMode.AST and script_parser is None:
            raise ValueError("AST extraction requires a script parser.")
        self._mode = mode
        self._field = field
        self._global_name = global_name
        self._script_parser = script_parser

    @property
    def prefix(self) -> str:
        return f"{self._global_name}.{self._field}="

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, document: PageDocument) -> str:
        """Return the raw JSON text of the first matching block.

        Raises
        ------
        MetadataNotFoundError
            If no candidate block in the document matches.
        """
        blocks = document.select(_SELECTORS[self._mode])
        for position, block in enumerate(blocks):
            result = self._try_block(block, position)
            if result is not None:
                return result

        raise MetadataNotFoundError(
            f"Can't find '{self._global_name}.{self._field}' "
            f"in {len(blocks)} script block(s).",
        )

    # ------------------------------------------------------------------
    # Per-block strategies
    # ------------------------------------------------------------------

    def _try_block(self, block: PageElement, position: int) -> str | None:
        if self._mode is ExtractionMode.PREFIX:
            return self._try_prefix(block.text())
        return self._try_ast(block.text(), position)

    def _try_prefix(self, content: str) -> str | None:
        script = content.strip()
        if script.startswith(self.prefix):
            return script[len(self.prefix):]
        return None

    def _try_ast(self, content: str, position: int) -> str | None:
        if self._script_parser is None:
            return None
        try:
            return extract_assignment_source(
                content,
                self._script_parser,
                self._global_name,
                self._field,
            )
        except ScriptParseError as exc:
            logger.debug("skipping script block #%d: %s", position, exc)
        except AssignmentNotFoundError:
            pass
        return None


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

def extract_title(document: PageDocument, *, source: str = "") -> str:
    """Return the text of the page's only ``<h1>``, sanitized for paths.

    Raises
    ------
    TitleMissingError
        If the page has no ``<h1>``.
    TitleAmbiguousError
        If the page has more than one ``<h1>``.
    """
    headings: Sequence[PageElement] = document.select("h1")
    where = f" in the page '{source}'" if source else ""
    if not headings:
        raise TitleMissingError(f"No <h1> tag found{where}.")
    if len(headings) > 1:
        raise TitleAmbiguousError(
            f"Multiple <h1> tags ({len(headings)}) found{where}.",
        )
    return sanitize_title(headings[0].text())

"""tree-sitter backed implementation of :class:`~bvgrab.core.protocols.ScriptParser`.

This module is the **only** place in the codebase that imports
``tree_sitter``.  The tree-sitter JavaScript grammar follows current
ECMAScript (optional chaining, class fields, BigInt, ``for await``...),
so modern page scripts parse.  The concrete syntax tree is converted
into the closed variants of :mod:`bvgrab.core.syntax`; tree-sitter
reports UTF-8 byte offsets, which are mapped back to character offsets
so spans slice the original ``str`` directly.
"""

from __future__ import annotations

import bisect
import itertools
from typing import Any

from bvgrab.core.syntax import (
    AssignmentExpression,
    Identifier,
    MemberExpression,
    OtherNode,
    Span,
    SyntaxNode,
)
from bvgrab.exceptions import EnvironmentError, ScriptParseError

_IDENTIFIER_KINDS: frozenset[str] = frozenset({"identifier", "property_identifier"})


def _import_tree_sitter() -> tuple[Any, Any]:
    """Import the parser runtime and the JavaScript grammar lazily."""
    try:
        import tree_sitter
        import tree_sitter_javascript
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "tree-sitter is not installed. "
            "Install with: pip install tree-sitter tree-sitter-javascript",
        ) from exc
    return tree_sitter, tree_sitter_javascript


class TreeSitterScriptParser:
    """Concrete :class:`ScriptParser` backed by tree-sitter-javascript.

    Usage::

        parser = TreeSitterScriptParser()
        tree = parser.parse("window.__INITIAL_STATE__ = {};")

    The underlying parser is built on first use and reused afterwards.
    """

    def __init__(self) -> None:
        self._parser: Any = None

    def _get_parser(self) -> Any:
        if self._parser is None:
            tree_sitter, grammar = _import_tree_sitter()
            self._parser = tree_sitter.Parser(tree_sitter.Language(grammar.language()))
        return self._parser

    def parse(self, source: str) -> SyntaxNode:
        """Parse *source* as a script and return its typed tree.

        Raises
        ------
        ScriptParseError
            When the grammar reports an error or missing token.
        """
        encoded = source.encode("utf-8", errors="surrogatepass")
        tree = self._get_parser().parse(encoded)
        root = tree.root_node
        if root.has_error:
            raise ScriptParseError(f"Invalid script source: {_describe_error(root)}")

        try:
            return _Converter(source, encoded).convert(root)
        except RecursionError as exc:
            raise ScriptParseError("Script is nested too deeply to parse.") from exc


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

def _describe_error(root: Any) -> str:
    """Locate the first error or missing node below *root*."""
    node = root
    while True:
        for child in node.children:
            if child.is_error or child.is_missing:
                row, column = child.start_point
                what = f"missing {child.type!r}" if child.is_missing else "unexpected input"
                return f"line {row + 1}, column {column + 1}: {what}"
            if child.has_error:
                node = child
                break
        else:
            row, column = node.start_point
            return f"line {row + 1}, column {column + 1}: unexpected input"


# ---------------------------------------------------------------------------
# tree-sitter tree → typed variants
# ---------------------------------------------------------------------------

class _Converter:
    """Convert tree-sitter nodes, translating byte offsets to characters."""

    def __init__(self, source: str, encoded: bytes) -> None:
        self._source = source
        # Byte offset at which each character starts; None when ASCII only.
        self._char_starts: list[int] | None = None
        if len(encoded) != len(source):
            widths = (len(ch.encode("utf-8", errors="surrogatepass")) for ch in source)
            self._char_starts = list(itertools.accumulate(widths, initial=0))

    def _offset(self, byte_offset: int) -> int:
        if self._char_starts is None:
            return byte_offset
        return bisect.bisect_left(self._char_starts, byte_offset)

    def _span(self, node: Any) -> Span:
        return Span(start=self._offset(node.start_byte), end=self._offset(node.end_byte))

    def convert(self, node: Any) -> SyntaxNode:
        kind: str = node.type
        span = self._span(node)

        if kind in _IDENTIFIER_KINDS:
            return Identifier(name=span.slice(self._source), span=span)
        if kind == "member_expression":
            return MemberExpression(
                object=self.convert(node.child_by_field_name("object")),
                property=self.convert(node.child_by_field_name("property")),
                computed=False,
                span=span,
            )
        if kind == "subscript_expression":
            return MemberExpression(
                object=self.convert(node.child_by_field_name("object")),
                property=self.convert(node.child_by_field_name("index")),
                computed=True,
                span=span,
            )
        if kind == "assignment_expression":
            return AssignmentExpression(
                operator="=",
                target=self.convert(node.child_by_field_name("left")),
                value=self.convert(node.child_by_field_name("right")),
                span=span,
            )
        if kind == "augmented_assignment_expression":
            operator = self._span(node.child_by_field_name("operator")).slice(self._source)
            return AssignmentExpression(
                operator=operator,
                target=self.convert(node.child_by_field_name("left")),
                value=self.convert(node.child_by_field_name("right")),
                span=span,
            )
        return OtherNode(
            kind=kind,
            children=tuple(self.convert(child) for child in node.named_children),
            span=span,
        )

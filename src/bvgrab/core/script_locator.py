"""Locate ``<global>.<property> = <expr>`` inside a script program.

The script is parsed into the typed tree of :mod:`bvgrab.core.syntax`
and walked depth-first in source order.  The first assignment whose
target is exactly ``Identifier(global).property`` wins; its right-hand
side span is sliced from the *original* text, so formatting, key order
and numeric literals survive byte-for-byte.
"""

from __future__ import annotations

from bvgrab.core.protocols import ScriptParser
from bvgrab.core.syntax import (
    AssignmentExpression,
    Identifier,
    MemberExpression,
    OtherNode,
    Span,
    SyntaxNode,
)
from bvgrab.exceptions import AssignmentNotFoundError


class AssignmentLocator:
    """Visitor recording the value span of one specific assignment.

    Parameters
    ----------
    global_name:
        Name of the global object, usually ``"window"``.
    property_name:
        Property being assigned, e.g. ``"__INITIAL_STATE__"``.
    """

    def __init__(self, global_name: str, property_name: str) -> None:
        self._global_name = global_name
        self._property_name = property_name
        self.value_span: Span | None = None

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def visit(self, node: SyntaxNode) -> Span | None:
        """Walk *node* and return the first matching value span."""
        stack: list[SyntaxNode] = [node]
        while stack and self.value_span is None:
            current = stack.pop()
            # Children are pushed reversed to keep source order.
            stack.extend(reversed(self._visit_node(current)))
        return self.value_span

    def _visit_node(self, node: SyntaxNode) -> tuple[SyntaxNode, ...]:
        if isinstance(node, AssignmentExpression):
            return self._visit_assignment(node)
        if isinstance(node, MemberExpression):
            return (node.object, node.property)
        if isinstance(node, OtherNode):
            return node.children
        # Identifier: leaf.
        return ()

    def _visit_assignment(self, node: AssignmentExpression) -> tuple[SyntaxNode, ...]:
        if node.operator == "=" and self._is_target(node.target):
            self.value_span = node.value.span
            return ()
        return (node.target, node.value)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def _is_target(self, target: SyntaxNode) -> bool:
        if not isinstance(target, MemberExpression) or target.computed:
            return False
        obj, prop = target.object, target.property
        return (
            isinstance(obj, Identifier)
            and obj.name == self._global_name
            and isinstance(prop, Identifier)
            and prop.name == self._property_name
        )


def locate_assignment(
    source: str,
    parser: ScriptParser,
    global_name: str,
    property_name: str,
) -> Span:
    """Return the span of the value assigned to ``global_name.property_name``.

    Raises
    ------
    ScriptParseError
        If *source* is not valid script source.
    AssignmentNotFoundError
        If the program contains no matching assignment.
    """
    tree = parser.parse(source)
    span = AssignmentLocator(global_name, property_name).visit(tree)
    if span is None:
        raise AssignmentNotFoundError(
            f"No '{global_name}.{property_name} = ...' assignment found.",
        )
    return span


def extract_assignment_source(
    source: str,
    parser: ScriptParser,
    global_name: str,
    property_name: str,
) -> str:
    """Return the verbatim source text of the assigned expression."""
    return locate_assignment(source, parser, global_name, property_name).slice(source)

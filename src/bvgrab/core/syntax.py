"""Typed syntax-tree variants produced by a script parser.

Only the node shapes needed to recognise ``<global>.<property> = <expr>``
are modelled explicitly.  Everything else collapses into
:class:`OtherNode`, which keeps its children so that assignments nested
anywhere in the program are still reachable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open character range ``[start, end)`` into the parsed source."""

    start: int
    end: int

    def slice(self, source: str) -> str:
        return source[self.start:self.end]


@dataclass(frozen=True, slots=True)
class Identifier:
    name: str
    span: Span


@dataclass(frozen=True, slots=True)
class MemberExpression:
    object: SyntaxNode
    property: SyntaxNode
    computed: bool
    """``True`` for ``obj[prop]``, ``False`` for ``obj.prop``."""

    span: Span


@dataclass(frozen=True, slots=True)
class AssignmentExpression:
    operator: str
    target: SyntaxNode
    value: SyntaxNode
    span: Span


@dataclass(frozen=True, slots=True)
class OtherNode:
    """Catch-all for every node kind the locator does not inspect."""

    kind: str
    children: tuple[SyntaxNode, ...]
    span: Span


SyntaxNode = Union[Identifier, MemberExpression, AssignmentExpression, OtherNode]

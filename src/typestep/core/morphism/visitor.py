# src/typestep/core/morphism/visitor.py
"""Visitor protocol and depth-first traversal of morphism ASTs.

Backends consume a morphism by implementing Visitor[S]. The traversal
threads a state value S through the hooks: each hook receives the state
produced by the previous one and returns the next. Hooks signal failure by
raising; the exception propagates out of walk() unchanged.

Call order for a pipeline From, Map, Seq(Map, ...), Yield:

    on_enter_morphism
      on_enter_from, on_leave_from
      on_enter_map, on_leave_map
      on_enter_seq
        on_enter_map, on_leave_map
        ...
      on_leave_seq
      on_enter_yield, on_leave_yield
    on_leave_morphism

depth is the fan-out nesting level: 0 for the root chain, n for the items
of a SeqNode nested n levels deep (and for that SeqNode's own hooks).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from typestep.contracts import UnsupportedNodeError
from typestep.core.morphism.ast import FromNode, MapNode, Node, SeqNode, YieldNode

if TYPE_CHECKING:
    from typestep.core.morphism.algebra import Morphism


class Visitor[S](Protocol):
    """Traversal contract every backend implements."""

    def on_enter_morphism(self, state: S, depth: int, node: SeqNode) -> S: ...

    def on_leave_morphism(self, state: S, depth: int, node: SeqNode) -> S: ...

    def on_enter_from(self, state: S, depth: int, node: FromNode) -> S: ...

    def on_leave_from(self, state: S, depth: int, node: FromNode) -> S: ...

    def on_enter_map(self, state: S, depth: int, node: MapNode) -> S: ...

    def on_leave_map(self, state: S, depth: int, node: MapNode) -> S: ...

    def on_enter_seq(self, state: S, depth: int, node: SeqNode) -> S: ...

    def on_leave_seq(self, state: S, depth: int, node: SeqNode) -> S: ...

    def on_enter_yield(self, state: S, depth: int, node: YieldNode) -> S: ...

    def on_leave_yield(self, state: S, depth: int, node: YieldNode) -> S: ...


def _walk_node[S](node: Node, visitor: Visitor[S], state: S, depth: int) -> S:
    match node:
        case FromNode():
            state = visitor.on_enter_from(state, depth, node)
            return visitor.on_leave_from(state, depth, node)
        case MapNode():
            state = visitor.on_enter_map(state, depth, node)
            return visitor.on_leave_map(state, depth, node)
        case SeqNode():
            if node.root:
                raise UnsupportedNodeError("SeqNode(root=True)", "root chain nested inside a pipeline")
            state = visitor.on_enter_seq(state, depth + 1, node)
            state = _walk_items(node, visitor, state, depth + 1)
            return visitor.on_leave_seq(state, depth + 1, node)
        case YieldNode():
            state = visitor.on_enter_yield(state, depth, node)
            return visitor.on_leave_yield(state, depth, node)
        case _:
            raise UnsupportedNodeError(type(node).__name__, "unknown node kind")


def _walk_items[S](seq: SeqNode, visitor: Visitor[S], state: S, depth: int) -> S:
    for item in seq.items:
        state = _walk_node(item, visitor, state, depth)
    return state


def walk_ast[S](root: SeqNode, visitor: Visitor[S], state: S) -> S:
    """Drive visitor over a root chain, returning the final state."""
    state = visitor.on_enter_morphism(state, 0, root)
    state = _walk_items(root, visitor, state, 0)
    return visitor.on_leave_morphism(state, 0, root)


def walk[S](morphism: Morphism[Any, Any], visitor: Visitor[S], state: S) -> S:
    """Drive visitor over a morphism, returning the final state."""
    return walk_ast(morphism.root, visitor, state)

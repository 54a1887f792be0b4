# src/typestep/core/morphism/algebra.py
"""Morphism algebra: typed, immutable pipeline composition.

A Morphism[A, B] describes a computation from A to B as an AST. Every
constructor returns a new morphism and leaves its argument untouched.

Fan-out contexts:
    lift, lift_p and wrap open a nested SeqNode; further joins land inside
    it until unit closes it. A nested context under construction is always
    the last item of its parent chain, so "the innermost open context" is
    found by following last items open_depth times from the root.

Type checking happens here, at construction time. The generic parameters
give static checkers the same guarantees; the type tokens carried on the
morphism make the check hold at runtime as well.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from typestep.contracts import EventBus, MorphismTypeError, Queue
from typestep.core.morphism.ast import (
    EventBusTarget,
    EventSource,
    FromNode,
    MapNode,
    Node,
    QueueTarget,
    SeqNode,
    YieldNode,
)
from typestep.core.morphism.functions import Function
from typestep.core.morphism.typeinfo import element_type, is_compatible, list_of, type_name


@dataclass(frozen=True)
class Morphism[A, B]:
    """Immutable description of a typed pipeline A -> B.

    Attributes:
        root: Root chain of the AST
        input_type: Type token of A
        output_type: Type token of B (NoneType once terminated)
        open_depth: Number of fan-out contexts still open
        terminated: True once a Yield has been appended
    """

    root: SeqNode
    input_type: Any
    output_type: Any
    open_depth: int = 0
    terminated: bool = False

    @property
    def is_complete(self) -> bool:
        """Whether the pipeline starts with From and ends with Yield."""
        items = self.root.items
        return bool(items) and isinstance(items[0], FromNode) and isinstance(items[-1], YieldNode)

    def __repr__(self) -> str:
        state = ", terminated" if self.terminated else f", open_depth={self.open_depth}"
        return f"Morphism[{type_name(self.input_type)}, {type_name(self.output_type)}]({len(self.root.items)} nodes{state})"


def _append_at(seq: SeqNode, depth: int, node: Node) -> SeqNode:
    """Append node to the chain `depth` levels below seq, rebuilding the path."""
    if depth == 0:
        return seq.append(node)
    inner = seq.last
    if not isinstance(inner, SeqNode):
        raise MorphismTypeError("compose", f"no open fan-out context at depth {depth}")
    return seq.replace_last(_append_at(inner, depth - 1, node))


def _open_contexts(m: Morphism[Any, Any]) -> list[SeqNode]:
    """Open fan-out contexts of m, outermost first."""
    contexts: list[SeqNode] = []
    seq = m.root
    for depth in range(1, m.open_depth + 1):
        inner = seq.last
        if not isinstance(inner, SeqNode):
            raise MorphismTypeError("compose", f"no open fan-out context at depth {depth}")
        contexts.append(inner)
        seq = inner
    return contexts


def _require_seeded(operation: str, context: SeqNode, before: str) -> None:
    # A fan-out compiles to a Map state whose first step must be a function
    if not context.items or not isinstance(context.items[0], MapNode):
        raise MorphismTypeError(operation, f"a fan-out opened by wrap needs a join before {before}")


def _require_open(operation: str, m: Morphism[Any, Any]) -> None:
    if m.terminated:
        raise MorphismTypeError(operation, "cannot compose after a terminal yield")


def _require_list(operation: str, m: Morphism[Any, Any]) -> Any:
    element = element_type(m.output_type)
    if element is None:
        raise MorphismTypeError(
            operation,
            f"upstream must produce a list, got {type_name(m.output_type)}",
            produced=m.output_type,
            expected=list,
        )
    return element


def _require_input(operation: str, produced: Any, f: Function[Any, Any]) -> None:
    if not is_compatible(produced, f.input_type):
        raise MorphismTypeError(
            operation,
            f"function {f.handle.name} expects {type_name(f.input_type)}, upstream produces {type_name(produced)}",
            produced=produced,
            expected=f.input_type,
        )


def from_[A](input_type: type[A], bus: EventBus, *categories: str) -> Morphism[A, A]:
    """Create the pipeline root, reading category `A` events from bus.

    Args:
        input_type: Type of the event detail
        bus: Event bus to subscribe to
        categories: detail-type values to match; default is the name of A
    """
    node = FromNode(source=EventSource(bus=bus, categories=tuple(categories)), type_name=type_name(input_type))
    return Morphism(root=SeqNode(items=(node,), root=True), input_type=input_type, output_type=input_type)


def join[A, B, C](f: Function[B, C], m: Morphism[A, B]) -> Morphism[A, C]:
    """Compose f: B -> C with m: A -> B, producing A -> C."""
    _require_open("join", m)
    _require_input("join", m.output_type, f)
    root = _append_at(m.root, m.open_depth, MapNode(binding=f.bind()))
    return Morphism(root=root, input_type=m.input_type, output_type=f.output_type, open_depth=m.open_depth)


def _lift(operation: str, n: int, f: Function[Any, Any], m: Morphism[Any, Any]) -> Morphism[Any, Any]:
    _require_open(operation, m)
    element = _require_list(operation, m)
    _require_input(operation, element, f)
    nested = SeqNode(items=(MapNode(binding=f.bind(n)),))
    root = _append_at(m.root, m.open_depth, nested)
    return Morphism(root=root, input_type=m.input_type, output_type=f.output_type, open_depth=m.open_depth + 1)


def lift[A, B, C](f: Function[B, C], m: Morphism[A, list[B]]) -> Morphism[A, C]:
    """Apply f: B -> C to every element of the list produced by m.

    The computation stays nested in the list context: later joins run per
    element until unit() collapses the context back into a list, or a
    yield sends the results on.
    """
    return _lift("lift", 1, f, m)


def lift_p[A, B, C](n: int, f: Function[B, C], m: Morphism[A, list[B]]) -> Morphism[A, C]:
    """Same as lift, with at most n concurrent invocations of f."""
    return _lift("lift_p", n, f, m)


def wrap[A, B](m: Morphism[A, list[B]]) -> Morphism[A, B]:
    """Open a fan-out over the elements of m's list without transforming them.

    The next join becomes the first step of the fan-out.
    """
    _require_open("wrap", m)
    element = _require_list("wrap", m)
    root = _append_at(m.root, m.open_depth, SeqNode())
    return Morphism(root=root, input_type=m.input_type, output_type=element, open_depth=m.open_depth + 1)


def unit[A, B](m: Morphism[A, B]) -> Morphism[A, list[B]]:
    """Close the innermost fan-out context, collecting results into a list."""
    _require_open("unit", m)
    if m.open_depth == 0:
        raise MorphismTypeError("unit", "no open fan-out context to close", produced=m.output_type)
    _require_seeded("unit", _open_contexts(m)[-1], "unit")
    return Morphism(
        root=m.root,
        input_type=m.input_type,
        output_type=list_of(m.output_type),
        open_depth=m.open_depth - 1,
    )


def _terminate(operation: str, node: YieldNode, m: Morphism[Any, Any]) -> Morphism[Any, None]:
    _require_open(operation, m)
    for context in _open_contexts(m):
        _require_seeded(operation, context, "the yield")
    return Morphism(
        root=m.root.append(node),
        input_type=m.input_type,
        output_type=type(None),
        open_depth=0,
        terminated=True,
    )


def to_queue[A, B](queue: Queue, m: Morphism[A, B]) -> Morphism[A, None]:
    """Yield the results of m to an SQS queue."""
    node = YieldNode(target=QueueTarget(queue=queue), type_name=type_name(m.output_type))
    return _terminate("to_queue", node, m)


def to_event_bus[A, B](source: str, bus: EventBus, m: Morphism[A, B], *categories: str) -> Morphism[A, None]:
    """Yield the results of m to an event bus.

    Args:
        source: Value of the event Source field
        bus: Destination bus
        m: Upstream morphism
        categories: Optional detail-type override (first one is used)
    """
    if not source:
        raise ValueError("to_event_bus requires a non-empty event source")
    target = EventBusTarget(bus=bus, source=source, categories=tuple(categories))
    node = YieldNode(target=target, type_name=type_name(m.output_type))
    return _terminate("to_event_bus", node, m)


__all__ = [
    "Morphism",
    "from_",
    "join",
    "lift",
    "lift_p",
    "to_event_bus",
    "to_queue",
    "unit",
    "wrap",
]

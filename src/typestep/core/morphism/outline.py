# src/typestep/core/morphism/outline.py
"""Human-readable outline of a morphism, built with the visitor protocol.

Used by `typestep explain`. Each entry is one line of the outline with its
fan-out depth, so callers can render it as a tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from typestep.core.morphism.ast import EventBusTarget, FromNode, MapNode, QueueTarget, SeqNode, YieldNode
from typestep.core.morphism.visitor import walk

if TYPE_CHECKING:
    from typestep.core.morphism.algebra import Morphism


@dataclass(frozen=True, slots=True)
class OutlineEntry:
    depth: int
    label: str


type Outline = tuple[OutlineEntry, ...]


class OutlineVisitor:
    """Visitor[Outline] producing one entry per node."""

    def on_enter_morphism(self, state: Outline, depth: int, node: SeqNode) -> Outline:
        return state

    def on_leave_morphism(self, state: Outline, depth: int, node: SeqNode) -> Outline:
        return state

    def on_enter_from(self, state: Outline, depth: int, node: FromNode) -> Outline:
        categories = ", ".join(node.source.categories or (node.type_name,))
        label = f"from {node.source.bus.name} [{categories}] -> {node.type_name}"
        return (*state, OutlineEntry(depth, label))

    def on_leave_from(self, state: Outline, depth: int, node: FromNode) -> Outline:
        return state

    def on_enter_map(self, state: Outline, depth: int, node: MapNode) -> Outline:
        label = f"map {node.binding.name}"
        if node.binding.concurrency != 1:
            label += f" (concurrency {node.binding.concurrency})"
        return (*state, OutlineEntry(depth, label))

    def on_leave_map(self, state: Outline, depth: int, node: MapNode) -> Outline:
        return state

    def on_enter_seq(self, state: Outline, depth: int, node: SeqNode) -> Outline:
        return (*state, OutlineEntry(depth - 1, "for each"))

    def on_leave_seq(self, state: Outline, depth: int, node: SeqNode) -> Outline:
        return state

    def on_enter_yield(self, state: Outline, depth: int, node: YieldNode) -> Outline:
        match node.target:
            case QueueTarget(queue=queue):
                label = f"yield {node.type_name} to queue {queue.name}"
            case EventBusTarget(bus=bus, source=source, categories=categories):
                kind = categories[0] if categories else node.type_name
                label = f"yield {node.type_name} to event bus {bus.name} as {kind} from {source}"
            case other:
                label = f"yield {node.type_name} to {type(other).__name__}"
        return (*state, OutlineEntry(depth, label))

    def on_leave_yield(self, state: Outline, depth: int, node: YieldNode) -> Outline:
        return state


def outline(morphism: Morphism[Any, Any]) -> Outline:
    """Outline entries of a morphism in traversal order."""
    return walk(morphism, OutlineVisitor(), ())

# src/typestep/core/morphism/ast.py
"""AST node definitions for morphisms.

Leaf module of the morphism package: plain frozen dataclasses, no
composition logic. A pipeline is a root SeqNode whose items form the
linear chain From, Map/Seq..., Yield. A nested SeqNode is a fan-out
sub-chain executed for every element of the list produced upstream.

The node kinds are a closed union (Node). Consumers match on it
exhaustively; see typestep.core.morphism.visitor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from typestep.contracts import EventBus, NodeKind, Queue
from typestep.core.morphism.functions import Binding


@dataclass(frozen=True, slots=True)
class EventSource:
    """Event bus the pipeline listens on, with its category filter.

    An empty categories tuple means "the name of the input type".
    """

    bus: EventBus
    categories: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class QueueTarget:
    """Yield destination: send the value as an SQS message body."""

    queue: Queue


@dataclass(frozen=True, slots=True)
class EventBusTarget:
    """Yield destination: put the value on an event bus as event detail.

    The first of categories, when given, overrides the detail-type that
    otherwise defaults to the name of the yielded type.
    """

    bus: EventBus
    source: str
    categories: tuple[str, ...] = ()


type YieldTarget = QueueTarget | EventBusTarget


@dataclass(frozen=True, slots=True)
class FromNode:
    """Pipeline root bound to an event source."""

    kind: ClassVar[NodeKind] = NodeKind.FROM

    source: EventSource
    type_name: str


@dataclass(frozen=True, slots=True)
class MapNode:
    """Single-step transform through a bound function."""

    kind: ClassVar[NodeKind] = NodeKind.MAP

    binding: Binding


@dataclass(frozen=True, slots=True)
class SeqNode:
    """A chain of nodes. The root chain has root=True; others are fan-outs."""

    kind: ClassVar[NodeKind] = NodeKind.SEQ

    items: tuple[Node, ...] = field(default_factory=tuple)
    root: bool = False

    def append(self, node: Node) -> SeqNode:
        return SeqNode(items=(*self.items, node), root=self.root)

    def replace_last(self, node: Node) -> SeqNode:
        return SeqNode(items=(*self.items[:-1], node), root=self.root)

    @property
    def last(self) -> Node | None:
        return self.items[-1] if self.items else None


@dataclass(frozen=True, slots=True)
class YieldNode:
    """Terminal sink of the pipeline."""

    kind: ClassVar[NodeKind] = NodeKind.YIELD

    target: YieldTarget
    type_name: str


type Node = FromNode | MapNode | SeqNode | YieldNode

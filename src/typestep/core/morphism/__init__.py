"""Morphism algebra: typed pipeline ASTs, function bindings and traversal."""

from typestep.core.morphism.algebra import (
    Morphism,
    from_,
    join,
    lift,
    lift_p,
    to_event_bus,
    to_queue,
    unit,
    wrap,
)
from typestep.core.morphism.ast import (
    EventBusTarget,
    EventSource,
    FromNode,
    MapNode,
    Node,
    QueueTarget,
    SeqNode,
    YieldNode,
    YieldTarget,
)
from typestep.core.morphism.functions import Binding, Function, function
from typestep.core.morphism.visitor import Visitor, walk, walk_ast

__all__ = [
    "Binding",
    "EventBusTarget",
    "EventSource",
    "FromNode",
    "Function",
    "MapNode",
    "Morphism",
    "Node",
    "QueueTarget",
    "SeqNode",
    "Visitor",
    "YieldNode",
    "YieldTarget",
    "from_",
    "function",
    "join",
    "lift",
    "lift_p",
    "to_event_bus",
    "to_queue",
    "unit",
    "walk",
    "walk_ast",
]

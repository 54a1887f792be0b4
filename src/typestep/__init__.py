"""
typestep: typed pipelines compiled to AWS Step Functions state machines.

Pipelines are composed from typed functions with a small morphism algebra
and compiled into an Amazon States Language definition plus the EventBridge
rule that triggers it.

Example:
    a = typestep.from_(Account, input_bus)
    b = typestep.join(get_user, a)
    c = typestep.to_queue(reply, b)

    compiled = typestep.compile_pipeline(c, dead_letter_queue=reply)
"""

from typestep.contracts import EventBus, LambdaFunction, Queue
from typestep.core.morphism import (
    Function,
    Morphism,
    from_,
    function,
    join,
    lift,
    lift_p,
    to_event_bus,
    to_queue,
    unit,
    wrap,
)
from typestep.core.statemachine import CompiledPipeline, StateMachineBuilder, compile_pipeline

__version__ = "0.1.0"

__all__ = [
    "CompiledPipeline",
    "EventBus",
    "Function",
    "LambdaFunction",
    "Morphism",
    "Queue",
    "StateMachineBuilder",
    "compile_pipeline",
    "from_",
    "function",
    "join",
    "lift",
    "lift_p",
    "to_event_bus",
    "to_queue",
    "unit",
    "wrap",
]

"""State machine compilation: builder, states, and compiled artifacts."""

from typestep.core.statemachine.builder import (
    CompilerState,
    StateMachineBuilder,
    compile_pipeline,
    fan_out_name,
)
from typestep.core.statemachine.graph import CompiledPipeline, StateMachine, TriggerRule
from typestep.core.statemachine.models import (
    Catch,
    CatchAndForward,
    Chain,
    Fail,
    ForEach,
    Invoke,
    SendToEventBus,
    SendToQueue,
    State,
)

__all__ = [
    "Catch",
    "CatchAndForward",
    "Chain",
    "CompiledPipeline",
    "CompilerState",
    "Fail",
    "ForEach",
    "Invoke",
    "SendToEventBus",
    "SendToQueue",
    "State",
    "StateMachine",
    "StateMachineBuilder",
    "TriggerRule",
    "compile_pipeline",
    "fan_out_name",
]

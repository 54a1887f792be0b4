"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core.
Settings classes are NOT re-exported here - import them from
typestep.core.config.
"""

from typestep.contracts.enums import NodeKind, OutputFormat, StateKind, TransitionKind
from typestep.contracts.errors import (
    DuplicateStateError,
    FunctionBindingError,
    IncompletePipelineError,
    MalformedPipelineError,
    MorphismTypeError,
    PipelineStructureError,
    TypeStepError,
    UndefinedEventSourceError,
    UnsupportedNodeError,
)
from typestep.contracts.resources import EventBus, LambdaFunction, Queue
from typestep.contracts.types import Category, JsonPath, StateName

__all__ = [
    "Category",
    "DuplicateStateError",
    "EventBus",
    "FunctionBindingError",
    "IncompletePipelineError",
    "JsonPath",
    "LambdaFunction",
    "MalformedPipelineError",
    "MorphismTypeError",
    "NodeKind",
    "OutputFormat",
    "PipelineStructureError",
    "Queue",
    "StateKind",
    "StateName",
    "TransitionKind",
    "TypeStepError",
    "UndefinedEventSourceError",
    "UnsupportedNodeError",
]

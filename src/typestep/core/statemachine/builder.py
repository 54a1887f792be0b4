# src/typestep/core/statemachine/builder.py
"""Compile morphisms into Step Functions state machines.

StateMachineBuilder implements Visitor[CompilerState]. Each hook takes the
compiler state produced by the previous hook and returns the next one; the
builder itself holds only configuration (dead-letter queue, limits), so
one builder may compile any number of pipelines.

CompilerState keeps one in-progress chain per open fan-out level:

    stack[0]   top-level chain
    stack[-1]  innermost chain, where new states are appended

names mirrors stack and accumulates the names of the states appended at
each level. Closing a fan-out hashes its accumulated names into the name of
the resulting Map state, so the same pipeline always compiles to the same
names.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

import structlog

from typestep.contracts import (
    IncompletePipelineError,
    MalformedPipelineError,
    Queue,
    UndefinedEventSourceError,
    UnsupportedNodeError,
)
from typestep.contracts.types import JsonPath, StateName
from typestep.core.canonical import short_digest
from typestep.core.morphism.ast import (
    EventBusTarget,
    EventSource,
    FromNode,
    MapNode,
    QueueTarget,
    SeqNode,
    YieldNode,
)
from typestep.core.morphism.functions import Binding
from typestep.core.morphism.visitor import walk
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
from typestep.core.statemachine.paths import ELEMENT_ROOT, EVENT_DETAIL, RESULT_FIELD

if TYPE_CHECKING:
    from typestep.core.config import TypeStepSettings
    from typestep.core.morphism.algebra import Morphism

logger = structlog.get_logger(__name__)

DEFAULT_STATE_MACHINE_NAME = "StateMachine"
SINK_STATE_NAME = StateName("Sink")


@dataclass(frozen=True, slots=True)
class CompilerState:
    """Immutable traversal state of one compilation.

    Attributes:
        stack: In-progress chains, one per open fan-out level
        names: Accumulated state names, parallel to stack
        input_path: Where the next emitted state reads its input from
        source: The From node, once visited
        result: The compiled pipeline, set when the traversal completes
    """

    stack: tuple[Chain, ...] = ((),)
    names: tuple[str, ...] = ("",)
    input_path: JsonPath = ELEMENT_ROOT
    source: FromNode | None = None
    result: CompiledPipeline | None = None

    @property
    def depth(self) -> int:
        """Number of open fan-out levels."""
        return len(self.stack) - 1

    @property
    def current(self) -> Chain:
        return self.stack[-1]

    def append(self, state: State) -> CompilerState:
        """Append state to the innermost chain."""
        return replace(
            self,
            stack=(*self.stack[:-1], (*self.stack[-1], state)),
            names=(*self.names[:-1], self.names[-1] + state.name),
        )

    def push(self) -> CompilerState:
        """Open a new, empty fan-out level."""
        return replace(self, stack=(*self.stack, ()), names=(*self.names, ""))

    def pop(self) -> tuple[CompilerState, Chain, str]:
        """Close the innermost level, returning it and its accumulated names."""
        if len(self.stack) < 2:
            raise MalformedPipelineError("malformed pipeline definition: fan-out closed without being opened")
        popped = replace(self, stack=self.stack[:-1], names=self.names[:-1])
        return popped, self.stack[-1], self.names[-1]

    def with_path(self, path: JsonPath) -> CompilerState:
        return replace(self, input_path=path)


def fan_out_name(accumulated: str) -> StateName:
    """Name of a fan-out Map state, derived from the names of its states."""
    return StateName("Seq" + short_digest(accumulated))


class StateMachineBuilder:
    """Visitor[CompilerState] that emits a state machine and its trigger rule.

    Args:
        name: Name of the state machine; the rule is named f"{name}Rule"
        dead_letter_queue: When set, every invoke state catches all errors
            and forwards its input plus the error to this queue before failing
        max_seq_concurrency: When set, caps MaxConcurrency of every fan-out

    Example:
        builder = StateMachineBuilder(dead_letter_queue=reply)
        compiled = builder.compile(pipeline)
        definition = compiled.state_machine.to_asl()
    """

    def __init__(
        self,
        *,
        name: str = DEFAULT_STATE_MACHINE_NAME,
        dead_letter_queue: Queue | None = None,
        max_seq_concurrency: int | None = None,
    ) -> None:
        if not name:
            raise ValueError("State machine name must be a non-empty string")
        if max_seq_concurrency is not None and max_seq_concurrency < 1:
            raise ValueError(f"max_seq_concurrency must be positive, got {max_seq_concurrency}")
        self.name = name
        self.dead_letter_queue = dead_letter_queue
        self.max_seq_concurrency = max_seq_concurrency

    @classmethod
    def from_settings(cls, settings: TypeStepSettings) -> StateMachineBuilder:
        """Create a builder configured from validated settings."""
        dlq = settings.dead_letter_queue
        return cls(
            name=settings.state_machine.name,
            dead_letter_queue=dlq.to_resource() if dlq is not None else None,
            max_seq_concurrency=settings.state_machine.max_seq_concurrency,
        )

    def compile(self, morphism: Morphism[Any, Any]) -> CompiledPipeline:
        """Compile a complete pipeline.

        Raises:
            IncompletePipelineError: If the pipeline has no From or no terminal Yield
            UnsupportedNodeError: If the AST holds an unknown node or payload
            PipelineStructureError: If the result is not a valid state machine
        """
        if not morphism.is_complete:
            raise IncompletePipelineError(
                f"Pipeline {morphism!r} is incomplete: it must start with from_() and end with to_queue() or to_event_bus()"
            )

        final = walk(morphism, self, CompilerState())
        if final.result is None:
            raise MalformedPipelineError("malformed pipeline definition: traversal produced no state machine")

        compiled = final.result
        logger.info(
            "pipeline_compiled",
            state_machine=compiled.state_machine.name,
            states=compiled.state_machine.state_count,
            categories=list(compiled.rule.categories),
            definition_hash=compiled.definition_hash[:12],
        )
        return compiled

    # --- Visitor hooks -------------------------------------------------------

    def on_enter_morphism(self, state: CompilerState, depth: int, node: SeqNode) -> CompilerState:
        return state

    def on_leave_morphism(self, state: CompilerState, depth: int, node: SeqNode) -> CompilerState:
        if len(state.stack) != 1:
            raise MalformedPipelineError(
                f"malformed pipeline definition: {state.depth} fan-out level(s) left open at end of pipeline"
            )
        if state.source is None:
            raise UndefinedEventSourceError("undefined event source for compute pipeline")

        state_machine = StateMachine(self.name, state.current)
        state_machine.validate()

        source = state.source.source
        rule = TriggerRule(
            name=f"{self.name}Rule",
            event_bus=source.bus,
            categories=source.categories or (state.source.type_name,),
            target=self.name,
        )
        return replace(state, result=CompiledPipeline(state_machine=state_machine, rule=rule))

    def on_enter_from(self, state: CompilerState, depth: int, node: FromNode) -> CompilerState:
        if not isinstance(node.source, EventSource):
            raise UnsupportedNodeError(type(node.source).__name__, "unknown input type")
        if state.source is not None:
            raise MalformedPipelineError("malformed pipeline definition: more than one event source")
        logger.debug("event_source_bound", bus=node.source.bus.name, type_name=node.type_name)
        return replace(state, source=node, input_path=EVENT_DETAIL)

    def on_leave_from(self, state: CompilerState, depth: int, node: FromNode) -> CompilerState:
        return state

    def on_enter_map(self, state: CompilerState, depth: int, node: MapNode) -> CompilerState:
        binding = node.binding
        if not isinstance(binding, Binding):
            raise UnsupportedNodeError(type(binding).__name__, "unknown compute type")

        invoke = Invoke(
            name=StateName("Map" + binding.name),
            function=binding.handle,
            input_path=state.input_path,
            concurrency=binding.concurrency,
            catch=self._catch_for(binding.name),
        )
        logger.debug("state_emitted", state=invoke.name, kind=invoke.kind, depth=depth, input_path=invoke.input_path)
        return state.append(invoke)

    def on_leave_map(self, state: CompilerState, depth: int, node: MapNode) -> CompilerState:
        return state.with_path(RESULT_FIELD)

    def on_enter_seq(self, state: CompilerState, depth: int, node: SeqNode) -> CompilerState:
        return state.push().with_path(ELEMENT_ROOT)

    def on_leave_seq(self, state: CompilerState, depth: int, node: SeqNode) -> CompilerState:
        parent, chain, accumulated = state.pop()
        if not chain or not isinstance(chain[0], Invoke):
            first = chain[0].name if chain else "nothing"
            raise MalformedPipelineError(
                f"malformed pipeline definition: fan-out at depth {depth} must start with a function invocation, "
                f"found {first}"
            )

        concurrency = chain[0].concurrency
        if self.max_seq_concurrency is not None:
            concurrency = min(concurrency, self.max_seq_concurrency)

        foreach = ForEach(
            name=fan_out_name(accumulated),
            chain=chain,
            concurrency=concurrency,
            items_path=RESULT_FIELD,
        )
        logger.debug("state_emitted", state=foreach.name, kind=foreach.kind, depth=depth - 1, concurrency=concurrency)
        return parent.append(foreach).with_path(RESULT_FIELD)

    def on_enter_yield(self, state: CompilerState, depth: int, node: YieldNode) -> CompilerState:
        sink: State
        match node.target:
            case QueueTarget(queue=queue):
                sink = SendToQueue(name=SINK_STATE_NAME, queue=queue, input_path=state.input_path)
            case EventBusTarget(bus=bus, source=source, categories=categories):
                sink = SendToEventBus(
                    name=SINK_STATE_NAME,
                    bus=bus,
                    source=source,
                    detail_type=categories[0] if categories else node.type_name,
                    input_path=state.input_path,
                )
            case other:
                raise UnsupportedNodeError(type(other).__name__, "unknown reply type")
        logger.debug("state_emitted", state=sink.name, kind=sink.kind, depth=depth, input_path=state.input_path)
        return state.append(sink)

    def on_leave_yield(self, state: CompilerState, depth: int, node: YieldNode) -> CompilerState:
        return state

    def _catch_for(self, function_name: str) -> Catch | None:
        if self.dead_letter_queue is None:
            return None
        return Catch(
            forward=CatchAndForward(name=StateName("Try" + function_name), queue=self.dead_letter_queue),
            fail=Fail(name=StateName("Err" + function_name)),
        )


def compile_pipeline(
    morphism: Morphism[Any, Any],
    *,
    name: str = DEFAULT_STATE_MACHINE_NAME,
    dead_letter_queue: Queue | None = None,
    max_seq_concurrency: int | None = None,
) -> CompiledPipeline:
    """Compile a pipeline into a state machine and its trigger rule.

    Convenience wrapper around StateMachineBuilder(...).compile(morphism).
    """
    builder = StateMachineBuilder(
        name=name,
        dead_letter_queue=dead_letter_queue,
        max_seq_concurrency=max_seq_concurrency,
    )
    return builder.compile(morphism)

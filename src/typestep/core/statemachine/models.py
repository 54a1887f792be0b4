# src/typestep/core/statemachine/models.py
"""State types and their Amazon States Language rendering.

Leaf module of the statemachine package: frozen dataclasses forming a
closed union (State), plus the functions turning a chain of states into
ASL. Transitions are implicit: a chain is an ordered tuple and each state
continues with the next one unless it is terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from typestep.contracts import EventBus, LambdaFunction, Queue, StateKind
from typestep.contracts.types import JsonPath, StateName
from typestep.core.statemachine.paths import ERROR_FIELD, RESULT_FIELD, WHOLE_INPUT

LAMBDA_INVOKE_RESOURCE = "arn:aws:states:::lambda:invoke"
SQS_SEND_MESSAGE_RESOURCE = "arn:aws:states:::sqs:sendMessage"
EVENTS_PUT_EVENTS_RESOURCE = "arn:aws:states:::events:putEvents"
CATCH_ALL_ERRORS = "States.ALL"


@dataclass(frozen=True, slots=True)
class Fail:
    """Terminal failure state."""

    kind: ClassVar[StateKind] = StateKind.FAIL

    name: StateName

    def to_asl(self) -> dict[str, Any]:
        return {"Type": "Fail"}


@dataclass(frozen=True, slots=True)
class CatchAndForward:
    """Sends the failed input, error included, to the dead-letter queue."""

    kind: ClassVar[StateKind] = StateKind.CATCH_AND_FORWARD

    name: StateName
    queue: Queue
    message_path: JsonPath = WHOLE_INPUT

    def to_asl(self) -> dict[str, Any]:
        return {
            "Type": "Task",
            "Resource": SQS_SEND_MESSAGE_RESOURCE,
            "Parameters": {
                "QueueUrl": self.queue.url,
                "MessageBody.$": self.message_path,
            },
        }


@dataclass(frozen=True, slots=True)
class Catch:
    """Error branch of an invoke state: forward to dead letter, then fail."""

    forward: CatchAndForward
    fail: Fail
    error_equals: tuple[str, ...] = (CATCH_ALL_ERRORS,)
    result_path: JsonPath = ERROR_FIELD

    @property
    def states(self) -> tuple[CatchAndForward, Fail]:
        return (self.forward, self.fail)

    def to_asl(self) -> dict[str, Any]:
        return {
            "ErrorEquals": list(self.error_equals),
            "ResultPath": self.result_path,
            "Next": self.forward.name,
        }


@dataclass(frozen=True, slots=True)
class Invoke:
    """Lambda invocation reading its payload from input_path."""

    kind: ClassVar[StateKind] = StateKind.INVOKE

    name: StateName
    function: LambdaFunction
    input_path: JsonPath
    concurrency: int = 1
    catch: Catch | None = None

    def to_asl(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "Type": "Task",
            "Resource": LAMBDA_INVOKE_RESOURCE,
            "InputPath": self.input_path,
            "Parameters": {
                "FunctionName": self.function.arn,
                "Payload.$": "$",
            },
        }
        if self.catch is not None:
            body["Catch"] = [self.catch.to_asl()]
        return body


@dataclass(frozen=True, slots=True)
class ForEach:
    """Map state running chain once per element of the list at items_path."""

    kind: ClassVar[StateKind] = StateKind.FOR_EACH

    name: StateName
    chain: tuple[State, ...]
    concurrency: int = 1
    items_path: JsonPath = RESULT_FIELD

    def to_asl(self) -> dict[str, Any]:
        start_at, states = render_chain(self.chain)
        return {
            "Type": "Map",
            "ItemsPath": self.items_path,
            "MaxConcurrency": self.concurrency,
            "ItemProcessor": {
                "ProcessorConfig": {"Mode": "INLINE"},
                "StartAt": start_at,
                "States": states,
            },
        }


@dataclass(frozen=True, slots=True)
class SendToQueue:
    """Terminal state sending the value at input_path to an SQS queue."""

    kind: ClassVar[StateKind] = StateKind.SEND_TO_QUEUE

    name: StateName
    queue: Queue
    input_path: JsonPath

    def to_asl(self) -> dict[str, Any]:
        return {
            "Type": "Task",
            "Resource": SQS_SEND_MESSAGE_RESOURCE,
            "Parameters": {
                "QueueUrl": self.queue.url,
                "MessageBody.$": self.input_path,
            },
        }


@dataclass(frozen=True, slots=True)
class SendToEventBus:
    """Terminal state putting the value at input_path on an event bus."""

    kind: ClassVar[StateKind] = StateKind.SEND_TO_EVENT_BUS

    name: StateName
    bus: EventBus
    source: str
    detail_type: str
    input_path: JsonPath

    def to_asl(self) -> dict[str, Any]:
        return {
            "Type": "Task",
            "Resource": EVENTS_PUT_EVENTS_RESOURCE,
            "Parameters": {
                "Entries": [
                    {
                        "Detail.$": self.input_path,
                        "DetailType": self.detail_type,
                        "Source": self.source,
                        "EventBusName": self.bus.address,
                    }
                ],
            },
        }


type State = Invoke | ForEach | SendToQueue | SendToEventBus | CatchAndForward | Fail
type Chain = tuple[State, ...]


def render_chain(chain: Chain) -> tuple[str, dict[str, Any]]:
    """Render a chain as (StartAt, States) of an ASL state machine or processor.

    Catch branches are rendered into the same States map as the state that
    owns them, which keeps them in the scope ASL requires.
    """
    if not chain:
        raise ValueError("Cannot render an empty chain of states")

    states: dict[str, Any] = {}
    for index, state in enumerate(chain):
        body = state.to_asl()
        if not state.kind.is_terminal:
            if index + 1 < len(chain):
                body["Next"] = chain[index + 1].name
            else:
                body["End"] = True
        elif state.kind != StateKind.FAIL:
            body["End"] = True
        states[state.name] = body

        if isinstance(state, Invoke) and state.catch is not None:
            forward = state.catch.forward.to_asl()
            forward["Next"] = state.catch.fail.name
            states[state.catch.forward.name] = forward
            states[state.catch.fail.name] = state.catch.fail.to_asl()

    return chain[0].name, states

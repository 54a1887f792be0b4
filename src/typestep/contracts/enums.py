"""All kinds used across subsystem boundaries.

Values are the canonical strings written into compiled artifacts and
structured log events.
"""

from enum import StrEnum


class NodeKind(StrEnum):
    """Kind of node in a morphism AST.

    The AST is a closed union of exactly these four kinds.
    """

    FROM = "from"
    MAP = "map"
    SEQ = "seq"
    YIELD = "yield"


class StateKind(StrEnum):
    """Kind of state emitted into a compiled state machine.

    Values:
        INVOKE: Lambda invocation task
        FOR_EACH: Map state iterating a nested chain over a list
        SEND_TO_QUEUE: SQS send-message task (terminal)
        SEND_TO_EVENT_BUS: EventBridge put-events task (terminal)
        CATCH_AND_FORWARD: Dead-letter forwarding task on the catch branch
        FAIL: Terminal failure state
    """

    INVOKE = "invoke"
    FOR_EACH = "for_each"
    SEND_TO_QUEUE = "send_to_queue"
    SEND_TO_EVENT_BUS = "send_to_event_bus"
    CATCH_AND_FORWARD = "catch_and_forward"
    FAIL = "fail"

    @property
    def is_terminal(self) -> bool:
        """Whether a state of this kind ends its chain."""
        return self in (StateKind.SEND_TO_QUEUE, StateKind.SEND_TO_EVENT_BUS, StateKind.FAIL)


class TransitionKind(StrEnum):
    """Label of an edge in the state machine graph.

    NEXT: Ordinary transition to the following state
    CATCH: Error transition from an invoke state to its failure branch
    ITEM: Link from a for-each state to the start of its item processor
    """

    NEXT = "next"
    CATCH = "catch"
    ITEM = "item"


class OutputFormat(StrEnum):
    """Serialization format for compiled artifacts."""

    JSON = "json"
    YAML = "yaml"

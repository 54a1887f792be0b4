"""References to externally provisioned AWS resources.

typestep never creates or calls these resources. It only needs a
stable identifier to derive state names and the addressing fields written
into the compiled definition.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LambdaFunction:
    """Opaque handle of a deployed Lambda function.

    Attributes:
        name: Stable identifier, used to derive state names
        arn: Function ARN written into invoke states
    """

    name: str
    arn: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("LambdaFunction.name must be a non-empty string")
        if not self.arn:
            raise ValueError(f"LambdaFunction '{self.name}' requires an ARN")


@dataclass(frozen=True, slots=True)
class Queue:
    """Handle of an SQS queue used as sink or dead-letter target."""

    name: str
    url: str
    arn: str | None = None

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError(f"Queue '{self.name}' requires a URL")


@dataclass(frozen=True, slots=True)
class EventBus:
    """Handle of an EventBridge event bus (event source or sink).

    When arn is given it is used to address the bus; otherwise the name is.
    """

    name: str
    arn: str | None = None

    @property
    def address(self) -> str:
        """Value written into EventBusName fields."""
        return self.arn if self.arn is not None else self.name

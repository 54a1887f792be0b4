# src/typestep/core/morphism/functions.py
"""Function binding layer.

A Function[A, B] is a typed view of a deployed Lambda: it pairs the opaque
handle with the types it consumes and produces. The types are only used
while composing morphisms. Once a function is placed in the AST it becomes
a Binding, which keeps the handle and the concurrency bound and nothing
else.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_type_hints

from typestep.contracts import FunctionBindingError, LambdaFunction
from typestep.core.morphism.typeinfo import type_name


@dataclass(frozen=True, slots=True)
class Binding:
    """A function handle placed in a pipeline.

    Attributes:
        handle: Lambda function invoked by the compiled state
        concurrency: Maximum simultaneous invocations inside a fan-out
    """

    handle: LambdaFunction
    concurrency: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            raise TypeError(f"concurrency must be an int, got {type(self.concurrency).__name__}")
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, got {self.concurrency}")

    @property
    def name(self) -> str:
        return self.handle.name


@dataclass(frozen=True)
class Function[A, B]:
    """Typed Lambda function A -> B.

    Attributes:
        handle: The deployed function
        input_type: Type token of the function input
        output_type: Type token of the function output (list[X] for A -> []X)
    """

    handle: LambdaFunction
    input_type: type[A] | Any
    output_type: type[B] | Any

    def bind(self, concurrency: int = 1) -> Binding:
        """Erase the types, keeping the handle and a concurrency bound."""
        return Binding(handle=self.handle, concurrency=concurrency)

    @classmethod
    def from_handler(cls, handler: Callable[..., Any], handle: LambdaFunction) -> Function[Any, Any]:
        """Build a typed function from the annotations of its handler.

        The input type is the annotation of the handler's last positional
        parameter, so handlers shaped like ``handler(event)`` and
        ``handler(context, event)`` both work. The output type is the
        return annotation.

        Raises:
            FunctionBindingError: If the handler lacks the needed annotations
        """
        try:
            hints = get_type_hints(handler)
        except (NameError, TypeError) as e:
            raise FunctionBindingError(f"Cannot resolve annotations of handler {handler!r}: {e}") from e

        params = [
            p
            for p in inspect.signature(handler).parameters.values()
            if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        ]
        if not params:
            raise FunctionBindingError(f"Handler {handler!r} takes no positional input parameter")

        event = params[-1]
        if event.name not in hints:
            raise FunctionBindingError(f"Handler {handler!r} parameter '{event.name}' has no type annotation")
        if "return" not in hints:
            raise FunctionBindingError(f"Handler {handler!r} has no return annotation")

        return cls(handle=handle, input_type=hints[event.name], output_type=hints["return"])

    def __repr__(self) -> str:
        return f"Function[{type_name(self.input_type)}, {type_name(self.output_type)}]({self.handle.name})"


def function[A, B](handle: LambdaFunction, input_type: type[A], output_type: type[B]) -> Function[A, B]:
    """Declare a typed function from an existing Lambda handle."""
    return Function(handle=handle, input_type=input_type, output_type=output_type)

"""Exception hierarchy for pipeline construction and compilation.

Three families, matching where the failure is detected:

- Construction time: MorphismTypeError, FunctionBindingError. Raised by the
  algebra while composing, before anything is compiled.
- Traversal: UnsupportedNodeError. Raised when a node or its payload is not
  one the compiler understands.
- Structure: PipelineStructureError and subclasses. Raised when the AST is
  well-typed but cannot be turned into a valid state machine.

Every error is fatal to the compilation attempt. No partial artifact is
ever returned.
"""

from __future__ import annotations


class TypeStepError(Exception):
    """Base class for all typestep errors."""


class MorphismTypeError(TypeStepError, TypeError):
    """Raised when a composition is ill-typed.

    Attributes:
        operation: Algebra operation that rejected the composition
        produced: Type produced by the upstream morphism
        expected: Type expected by the consumer
    """

    def __init__(self, operation: str, message: str, *, produced: object = None, expected: object = None) -> None:
        self.operation = operation
        self.produced = produced
        self.expected = expected
        super().__init__(f"{operation}: {message}")


class FunctionBindingError(TypeStepError, TypeError):
    """Raised when a handler's input/output types cannot be determined."""


class UnsupportedNodeError(TypeStepError):
    """Raised when the traversal meets a node or payload it cannot compile.

    Attributes:
        kind: Name of the offending node or payload type
    """

    def __init__(self, kind: str, message: str) -> None:
        self.kind = kind
        super().__init__(f"{message}: {kind}")


class PipelineStructureError(TypeStepError, ValueError):
    """Raised when a pipeline cannot be turned into a valid state machine."""


class MalformedPipelineError(PipelineStructureError):
    """Raised for unbalanced fan-out nesting or a fan-out without an invoke."""


class UndefinedEventSourceError(PipelineStructureError):
    """Raised when compilation finishes without having seen a From node."""


class IncompletePipelineError(PipelineStructureError):
    """Raised when compiling a pipeline that has no terminal Yield."""


class DuplicateStateError(PipelineStructureError):
    """Raised when two states in one state machine share a name.

    Attributes:
        names: The duplicated state names
    """

    def __init__(self, names: list[str]) -> None:
        self.names = tuple(names)
        super().__init__(
            f"Duplicate state name(s) in state machine: {', '.join(sorted(set(names)))}. "
            "Each function may be bound at most once per pipeline."
        )

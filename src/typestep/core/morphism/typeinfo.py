# src/typestep/core/morphism/typeinfo.py
"""Runtime type-token helpers for construction-time type checking.

Morphisms and functions carry the Python types they consume and produce.
These helpers compare those tokens when morphisms are composed, so an
ill-typed pipeline fails before it ever reaches the compiler.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, get_args, get_origin

_LIST_ORIGINS: tuple[Any, ...] = (list, Sequence)


def type_name(tp: Any) -> str:
    """Short, stable name of a type token.

    Classes give their __name__; list types give 'list[Element]'; None gives
    'None'. The name of the pipeline input type is the default event
    category, so it must not depend on the defining module.
    """
    if tp is None or tp is type(None):
        return "None"
    if tp is Any:
        return "Any"
    origin = get_origin(tp)
    if origin is not None:
        args = ", ".join(type_name(arg) for arg in get_args(tp))
        return f"{getattr(origin, '__name__', str(origin))}[{args}]"
    name = getattr(tp, "__name__", None)
    return name if isinstance(name, str) else str(tp)


def element_type(tp: Any) -> Any | None:
    """Element type of a list type token, or None if tp is not a list type."""
    if tp is list:
        return Any
    if get_origin(tp) in _LIST_ORIGINS:
        args = get_args(tp)
        return args[0] if args else Any
    return None


def list_of(tp: Any) -> Any:
    """The list type token with element tp."""
    return list[tp]


def is_compatible(produced: Any, expected: Any) -> bool:
    """Whether a value of type `produced` may flow into a slot of type `expected`.

    Rules:
    - Any on either side is compatible
    - Equal tokens are compatible
    - A subclass is compatible with its base class
    - List types are compared element-wise
    """
    if produced is Any or expected is Any:
        return True
    if produced == expected:
        return True

    produced_element = element_type(produced)
    expected_element = element_type(expected)
    if produced_element is not None or expected_element is not None:
        if produced_element is None or expected_element is None:
            return False
        return is_compatible(produced_element, expected_element)

    if isinstance(produced, type) and isinstance(expected, type):
        return issubclass(produced, expected)
    return False

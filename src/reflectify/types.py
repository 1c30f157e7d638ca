from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Final, Literal, TypeAlias

if TYPE_CHECKING:
    from reflectify.descriptor import TypeDescriptor


class Kind(str, Enum):
    """Classify the value wrapped by a ``TypeDescriptor``."""

    FUNCTION = "function"
    """Any callable that is not a struct instance, classes included."""

    STRUCT = "struct"
    """A struct instance held by value."""

    POINTER = "pointer"
    """A struct instance held by reference (declared with ``Ref[T]``)."""

    SCALAR = "scalar"
    """An ``int``, ``str`` or ``bool`` value."""

    OTHER = "other"
    """Anything else: floats, containers, ``None``, unannotated values."""


class ScalarKind(str, Enum):
    """Primitive kinds understood by ``ValueCoercer``."""

    INTEGER = "integer"
    TEXT = "text"
    BOOLEAN = "boolean"
    OTHER = "other"


class _Sentinel(Enum):
    UNSET = "UNSET"
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return self.value


UNSET: Final = _Sentinel.UNSET
"""Returned by a resolver that declines to resolve a parameter."""

MISSING: Final = _Sentinel.MISSING
"""Passed to resolvers when no raw argument is left for the parameter."""

Unset: TypeAlias = Literal[_Sentinel.UNSET]
Missing: TypeAlias = Literal[_Sentinel.MISSING]

ParamResolver: TypeAlias = Callable[["TypeDescriptor", Any], "tuple[Any, bool]"]
"""Decide the value of one parameter.

Called with the parameter descriptor and the head raw argument (or ``MISSING``).
Returns ``(value, consumed)``; ``value`` of ``UNSET`` declines, ``consumed``
drops the head raw argument for the following parameters.
"""

from __future__ import annotations

from typing import Any


class ReflectifyError(Exception):
    """Represent a base class for all reflectify-specific failures.

    Catch this type when you want to handle any reflectify error path without
    matching each concrete exception class individually.
    """


class ReflectifyMethodNotFoundError(ReflectifyError):
    """Signal a method lookup by name that found nothing.

    ``TypeDescriptor.method_by_name`` reports a miss as ``None``; this error is
    only produced as the failure value of ``TypeDescriptor.call_method`` so
    callers get an ordinary ``CallResult`` instead of an exception.
    """

    def __init__(self, name: str, owner: str) -> None:
        self.name = name
        self.owner = owner
        super().__init__(f"'{owner}' has no method named '{name}'.")


class ReflectifyDecodeError(ReflectifyError):
    """Signal a field value that could not be weakly decoded into a struct.

    Decode failures are dropped by default. This error is raised by
    ``TypeDescriptor.fill`` only when ``raise_on_decode_error`` is enabled in
    ``ReflectifySettings``.
    """

    def __init__(self, field: str, value: Any, cause: Exception) -> None:
        self.field = field
        self.value = value
        self.cause = cause
        super().__init__(f"Cannot decode {value!r} into field '{field}': {cause}")


class ReflectifyInvalidTargetError(ReflectifyError):
    """Signal an operation applied to a descriptor of the wrong kind.

    Raised when ``call`` is used on a descriptor that wraps no callable, or when
    ``fill`` is used on a descriptor that wraps no struct.
    """

"""Method enumeration and receiver detection for described types.

A function taken from a class (``User.greet``) is an ordinary function whose
first parameter happens to be the instance. Nothing at the type level tells it
apart from a plain function that takes a ``User`` first, so receivers are
detected with a name heuristic: the first parameter is a receiver when its
type has a method with the callable's own name.

A plain function ``greet(user: User)`` is therefore classified as having a
receiver whenever ``User`` also defines ``greet``. That false positive is
accepted rather than guessed around.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from reflectify._internal.callables import DeclaredParameter, callable_name, declared_parameters
from reflectify.types import Kind

_STRUCT_KINDS = (Kind.STRUCT, Kind.POINTER)


def has_method(tp: Any, name: str) -> bool:
    """Return whether ``tp`` exposes a method called ``name``."""
    member = inspect.getattr_static(tp, name, None)
    if isinstance(member, (staticmethod, classmethod)):
        return True
    return inspect.isfunction(member) or inspect.ismethoddescriptor(member)


def method_table(tp: type[Any], *, include_private: bool = False) -> dict[str, Callable[..., Any]]:
    """Return the methods of a class as taken from the class, keyed by name.

    Dunder methods are never listed. ``_``-prefixed methods are listed only
    with ``include_private``.
    """
    result: dict[str, Callable[..., Any]] = {}
    for name in sorted(dir(tp)):
        if name.startswith("__") and name.endswith("__"):
            continue
        if name.startswith("_") and not include_private:
            continue
        if not has_method(tp, name):
            continue
        member = getattr(tp, name)
        if callable(member):
            result[name] = member
    return result


def has_receiver(func: Callable[..., Any], *, owner: type[Any] | None = None) -> bool:
    """Return whether the first declared parameter of ``func`` is a receiver."""
    return receiver_parameter(func, owner=owner) is not None


def receiver_parameter(
    func: Callable[..., Any],
    *,
    owner: type[Any] | None = None,
) -> DeclaredParameter | None:
    """Return the receiver parameter of ``func``, or ``None`` when there is none.

    ``owner`` is the class ``func`` was taken from, when the caller knows it.
    """
    parameters = declared_parameters(func, owner=owner)
    if not parameters:
        return None
    first = parameters[0]
    if first.type_info.kind not in _STRUCT_KINDS:
        return None
    if not has_method(first.type_info.origin, callable_name(func)):
        return None
    return first


__all__ = ["has_method", "has_receiver", "method_table", "receiver_parameter"]

from __future__ import annotations

import inspect
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from reflectify._internal.type_checks import (
    TypeInfo,
    is_runtime_class,
    resolved_type_hints,
    type_info_for_annotation,
)

_LOCALS_MARKER = "<locals>"
_DECLARED_PARAMETER_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


@dataclass(frozen=True, slots=True)
class DeclaredParameter:
    """One declared parameter of a callable with its classified type."""

    name: str
    position: int
    keyword_only: bool
    type_info: TypeInfo


def callable_name(func: Any) -> str:
    """Return the unqualified name of a callable (``<lambda>`` for anonymous ones)."""
    name = getattr(func, "__name__", None)
    if isinstance(name, str):
        return name
    return type(func).__name__


def callable_module(func: Any) -> str:
    module = getattr(func, "__module__", None)
    if isinstance(module, str):
        return module
    return type(func).__module__


def callable_qualname(func: Any) -> str:
    qualname = getattr(func, "__qualname__", None)
    if isinstance(qualname, str):
        return qualname
    return callable_name(func)


def owner_qualname(func: Any) -> str | None:
    """Return the qualified name of the class a method value was taken from.

    ``Outer.<locals>.helper`` is a nested function, ``Outer.method`` is a method,
    so a qualname whose second to last segment is a class name marks a method.
    """
    if inspect.ismethod(func):
        owner = func.__self__
        owner_class = owner if is_runtime_class(owner) else type(owner)
        return owner_class.__qualname__
    if is_runtime_class(func):
        return None
    parts = callable_qualname(func).split(".")
    if len(parts) < 2 or parts[-2] == _LOCALS_MARKER:  # noqa: PLR2004
        return None
    return ".".join(parts[:-1])


def owner_class(func: Any) -> type[Any] | None:
    """Resolve the class a method value was taken from, when it is reachable.

    Classes defined inside function bodies are not reachable from module
    globals, so methods of local classes resolve to ``None``.
    """
    if inspect.ismethod(func):
        owner = func.__self__
        return owner if is_runtime_class(owner) else type(owner)
    qualname = owner_qualname(func)
    if qualname is None or _LOCALS_MARKER in qualname.split("."):
        return None

    target: Any = getattr(func, "__globals__", None)
    if target is None:
        target = getattr(sys.modules.get(callable_module(func)), "__dict__", {})
    parts = qualname.split(".")
    target = target.get(parts[0])
    for part in parts[1:]:
        target = getattr(target, part, None)
    return target if is_runtime_class(target) else None


def declared_parameters(
    func: Callable[..., Any],
    *,
    owner: type[Any] | None = None,
) -> list[DeclaredParameter]:
    """Return the declared parameters of a callable in declaration order.

    ``*args`` and ``**kwargs`` are not declared parameters. An unannotated
    first parameter of a method value is typed as its owning class, unless the
    method is a ``staticmethod``.

    Args:
        func: Callable to inspect.
        owner: Class the callable was taken from, when already known. Otherwise
            it is looked up from the qualified name.

    """
    try:
        signature = inspect.signature(func)
    except (ValueError, TypeError):
        return []

    hints = _parameter_hints(func)
    receiver_type = _receiver_type(func, owner)
    result: list[DeclaredParameter] = []
    for parameter in signature.parameters.values():
        if parameter.kind not in _DECLARED_PARAMETER_KINDS:
            continue
        annotation = hints.get(parameter.name, parameter.annotation)
        if not result and annotation is inspect.Parameter.empty and receiver_type is not None:
            annotation = receiver_type
        result.append(
            DeclaredParameter(
                name=parameter.name,
                position=len(result),
                keyword_only=parameter.kind is inspect.Parameter.KEYWORD_ONLY,
                type_info=type_info_for_annotation(annotation),
            ),
        )
    return result


def _parameter_hints(func: Any) -> dict[str, Any]:
    if is_runtime_class(func):
        hints = resolved_type_hints(func)
        hints.update(resolved_type_hints(func.__init__))
        return hints
    return resolved_type_hints(func)


def _receiver_type(func: Any, owner: type[Any] | None) -> type[Any] | None:
    if inspect.ismethod(func):
        return None
    owner = owner if owner is not None else owner_class(func)
    if owner is None:
        return None
    if isinstance(inspect.getattr_static(owner, callable_name(func), None), staticmethod):
        return None
    return owner

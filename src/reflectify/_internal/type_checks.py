from __future__ import annotations

import dataclasses
import inspect
import types
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, TypeGuard, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from reflectify.coercion import scalar_kind_of_type
from reflectify.markers import Ref, is_ref_annotation, strip_annotated
from reflectify.types import Kind, ScalarKind

_BUILTIN_NON_STRUCTS: tuple[type[Any], ...] = (
    int,
    str,
    bool,
    float,
    complex,
    bytes,
    bytearray,
    list,
    dict,
    set,
    frozenset,
    tuple,
    type,
    Enum,
    BaseException,
)
_CONTAINER_ORIGINS: tuple[type[Any], ...] = (list, dict, set, frozenset, tuple)
_EMPTY_ZEROS: dict[type[Any], Any] = {float: 0.0, complex: 0j, bytes: b"", bytearray: b""}


@dataclass(frozen=True, slots=True)
class TypeInfo:
    """Normalized description of one runtime type."""

    annotation: Any
    """The annotation as written, ``Annotated``/``Optional`` wrappers included."""
    origin: Any
    """The bare type used for classification."""
    kind: Kind
    scalar_kind: ScalarKind = ScalarKind.OTHER
    optional: bool = False


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_namedtuple_type(candidate: object) -> bool:
    return (
        is_runtime_class(candidate)
        and issubclass(candidate, tuple)
        and hasattr(candidate, "_fields")
    )


def is_attrs_type(candidate: object) -> bool:
    return is_runtime_class(candidate) and hasattr(candidate, "__attrs_attrs__")


def is_pydantic_model_type(candidate: object) -> bool:
    return is_runtime_class(candidate) and issubclass(candidate, BaseModel)


def is_struct_type(candidate: object) -> TypeGuard[type[Any]]:
    """Return whether a class describes a struct: a record of named fields."""
    if not is_runtime_class(candidate):
        return False
    if is_namedtuple_type(candidate):
        return True
    if (
        dataclasses.is_dataclass(candidate)
        or is_attrs_type(candidate)
        or is_pydantic_model_type(candidate)
    ):
        return True
    if issubclass(candidate, _BUILTIN_NON_STRUCTS) or candidate.__module__ == "builtins":
        return False
    # callable instances of plain classes describe as functions
    return not any("__call__" in vars(base) for base in candidate.__mro__[:-1])


def is_struct_instance(value: object) -> bool:
    return not is_runtime_class(value) and is_struct_type(type(value))


def resolved_type_hints(obj: Any) -> dict[str, Any]:
    """Resolve annotations with extras, falling back to the raw annotation mapping."""
    try:
        return get_type_hints(obj, include_extras=True)
    except (AttributeError, NameError, TypeError):
        return dict(getattr(obj, "__annotations__", {}) or {})


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Return ``(inner, True)`` for ``X | None``, otherwise ``(annotation, False)``."""
    if get_origin(annotation) not in (Union, types.UnionType):
        return annotation, False
    members = [arg for arg in get_args(annotation) if arg is not type(None)]
    if len(members) == 1:
        return members[0], True
    return annotation, False


def type_info_for_annotation(annotation: Any) -> TypeInfo:
    """Classify a parameter or field annotation."""
    is_ref = is_ref_annotation(annotation)
    bare, optional = unwrap_optional(strip_annotated(annotation))
    is_ref = is_ref or is_ref_annotation(bare)
    bare = strip_annotated(bare)

    if bare is Any or bare is inspect.Parameter.empty or isinstance(bare, str):
        return TypeInfo(annotation=annotation, origin=Any, kind=Kind.OTHER, optional=optional)

    scalar_kind = _scalar_kind(bare)
    if scalar_kind is not ScalarKind.OTHER:
        return TypeInfo(
            annotation=annotation,
            origin=bare,
            kind=Kind.SCALAR,
            scalar_kind=scalar_kind,
            optional=optional,
        )
    if is_struct_type(bare):
        return TypeInfo(
            annotation=annotation,
            origin=bare,
            kind=Kind.POINTER if is_ref else Kind.STRUCT,
            optional=optional,
        )
    return TypeInfo(annotation=annotation, origin=bare, kind=Kind.OTHER, optional=optional)


def type_info_for_value(value: Any, *, by_reference: bool = False) -> TypeInfo:
    """Classify a concrete runtime value."""
    if is_struct_instance(value):
        tp = type(value)
        if by_reference:
            return TypeInfo(annotation=Ref[tp], origin=tp, kind=Kind.POINTER)
        return TypeInfo(annotation=tp, origin=tp, kind=Kind.STRUCT)
    scalar_kind = _scalar_kind(type(value))
    if scalar_kind is not ScalarKind.OTHER:
        return TypeInfo(
            annotation=type(value),
            origin=type(value),
            kind=Kind.SCALAR,
            scalar_kind=scalar_kind,
        )
    if callable(value):
        return TypeInfo(annotation=type(value), origin=value, kind=Kind.FUNCTION)
    return TypeInfo(annotation=type(value), origin=type(value), kind=Kind.OTHER)


def _scalar_kind(tp: Any) -> ScalarKind:
    if is_runtime_class(tp) and issubclass(tp, Enum):
        return ScalarKind.OTHER
    return scalar_kind_of_type(tp)


def struct_fields(tp: type[Any]) -> dict[str, Any]:
    """Return declared fields of a struct type mapped to their annotations."""
    hints = resolved_type_hints(tp)

    if is_pydantic_model_type(tp):
        return {
            name: hints.get(name, field.annotation) for name, field in tp.model_fields.items()
        }
    if dataclasses.is_dataclass(tp):
        return {field.name: hints.get(field.name, field.type) for field in dataclasses.fields(tp)}
    if is_attrs_type(tp):
        return {
            attribute.name: hints.get(attribute.name, attribute.type or Any)
            for attribute in tp.__attrs_attrs__
        }
    if is_namedtuple_type(tp):
        return {name: hints.get(name, Any) for name in tp._fields}

    return {
        name: hint
        for name, hint in hints.items()
        if get_origin(hint) is not ClassVar and hint is not ClassVar
    }


def zero_value(annotation: Any, _seen: frozenset[type[Any]] = frozenset()) -> Any:
    """Return the zero value for an annotation.

    Scalars become ``0``/``""``/``False``, containers become empty, structs get
    every field zeroed recursively and anything unknown becomes ``None``.
    """
    info = type_info_for_annotation(annotation)
    if info.optional:
        return None
    if info.kind is Kind.SCALAR:
        return {ScalarKind.INTEGER: 0, ScalarKind.TEXT: "", ScalarKind.BOOLEAN: False}[
            info.scalar_kind
        ]
    if info.kind in (Kind.STRUCT, Kind.POINTER):
        return zero_struct(info.origin, _seen)

    origin = get_origin(info.origin) or info.origin
    if is_runtime_class(origin):
        if issubclass(origin, _CONTAINER_ORIGINS):
            return origin()
        for empty_type, empty in _EMPTY_ZEROS.items():
            if issubclass(origin, empty_type):
                return empty
    return None


def zero_struct(tp: type[Any], _seen: frozenset[type[Any]] = frozenset()) -> Any:
    """Build an instance of ``tp`` whose declared fields all hold zero values."""
    if tp in _seen:
        return None
    seen = _seen | {tp}
    values = {name: zero_value(hint, seen) for name, hint in struct_fields(tp).items()}

    if is_pydantic_model_type(tp):
        return tp.model_construct(**values)
    if dataclasses.is_dataclass(tp):
        init_names = {field.name for field in dataclasses.fields(tp) if field.init}
        return tp(**{name: value for name, value in values.items() if name in init_names})
    if is_attrs_type(tp):
        return tp(
            **{
                _attrs_alias(attribute): values[attribute.name]
                for attribute in tp.__attrs_attrs__
                if attribute.init
            },
        )
    if is_namedtuple_type(tp):
        return tp(**values)

    try:
        instance = tp.__new__(tp)
    except TypeError:
        return None
    for name, value in values.items():
        setattr(instance, name, value)
    return instance


def replace_fields(instance: Any, updates: dict[str, Any]) -> Any:
    """Return a struct with ``updates`` applied, mutating in place when possible.

    Immutable flavours (named tuples, frozen dataclasses, frozen attrs classes
    and frozen pydantic models) are rebuilt instead.
    """
    if not updates:
        return instance
    tp = type(instance)
    if is_namedtuple_type(tp):
        return instance._replace(**updates)
    if _is_frozen(instance):
        return _rebuild(instance, updates)
    for name, value in updates.items():
        setattr(instance, name, value)
    return instance


def _is_frozen(instance: Any) -> bool:
    tp = type(instance)
    if dataclasses.is_dataclass(tp):
        return bool(tp.__dataclass_params__.frozen)  # type: ignore[attr-defined]
    if is_pydantic_model_type(tp):
        return bool(tp.model_config.get("frozen"))
    if is_attrs_type(tp):
        return getattr(tp.__setattr__, "__name__", "") == "_frozen_setattrs"
    return False


def _rebuild(instance: Any, updates: dict[str, Any]) -> Any:
    tp = type(instance)
    if dataclasses.is_dataclass(tp):
        return dataclasses.replace(instance, **updates)
    if is_pydantic_model_type(tp):
        return instance.model_copy(update=updates)
    values = {attribute.name: getattr(instance, attribute.name) for attribute in tp.__attrs_attrs__}
    values.update(updates)
    return tp(
        **{
            _attrs_alias(attribute): values[attribute.name]
            for attribute in tp.__attrs_attrs__
            if attribute.init
        },
    )


def _attrs_alias(attribute: Any) -> str:
    return getattr(attribute, "alias", None) or attribute.name.lstrip("_")


__all__ = [
    "TypeInfo",
    "is_runtime_class",
    "is_struct_instance",
    "is_struct_type",
    "replace_fields",
    "resolved_type_hints",
    "struct_fields",
    "type_info_for_annotation",
    "type_info_for_value",
    "zero_struct",
    "zero_value",
]

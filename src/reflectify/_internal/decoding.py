from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, get_args, get_origin

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from reflectify._internal.type_checks import (
    replace_fields,
    struct_fields,
    type_info_for_annotation,
    zero_struct,
)
from reflectify.coercion import ValueCoercer, scalar_kind_of
from reflectify.exceptions import ReflectifyDecodeError
from reflectify.markers import strip_annotated
from reflectify.types import Kind, ScalarKind

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = (list, set, frozenset)
_SEQUENCES = (list, tuple, set, frozenset)


class WeakDecoder:
    """Populate struct fields from a loosely typed mapping.

    Keys match field names exactly first, then case-insensitively. Unknown keys
    are ignored and fields without a key keep their current value. Primitive
    values are converted with ``ValueCoercer``; everything else is validated by
    pydantic in lax mode. Values that cannot be decoded are skipped unless
    ``raise_on_error`` is set.
    """

    def __init__(self, *, raise_on_error: bool = False) -> None:
        self._raise_on_error = raise_on_error

    def decode(self, source: Mapping[str, Any], target: Any) -> Any:
        """Decode ``source`` into ``target`` and return the updated struct.

        Mutable structs are updated in place and returned. Immutable ones are
        rebuilt, so callers must use the return value.

        Args:
            source: Mapping of field names to raw values.
            target: Struct instance receiving the values.

        """
        folded_keys = {key.casefold(): key for key in source if isinstance(key, str)}
        updates: dict[str, Any] = {}
        for name, annotation in struct_fields(type(target)).items():
            key = name if name in source else folded_keys.get(name.casefold())
            if key is None:
                continue
            value = source[key]
            try:
                updates[name] = self.decode_value(value, annotation)
            except (ValidationError, PydanticSchemaGenerationError) as error:
                if self._raise_on_error:
                    raise ReflectifyDecodeError(name, value, error) from error
                logger.debug(
                    "Dropping undecodable value %r for field '%s' of %s",
                    value,
                    name,
                    type(target).__qualname__,
                )
        return replace_fields(target, updates)

    def decode_value(self, value: Any, annotation: Any) -> Any:
        """Convert one raw value toward ``annotation``."""
        info = type_info_for_annotation(annotation)
        if value is None and info.optional:
            return None

        if info.kind is Kind.SCALAR and scalar_kind_of(value) is not ScalarKind.OTHER:
            return ValueCoercer(value).coerce_to(info.scalar_kind)

        if info.kind in (Kind.STRUCT, Kind.POINTER):
            if isinstance(value, info.origin):
                return value
            if isinstance(value, Mapping):
                return self.decode(value, zero_struct(info.origin))

        if info.origin is Any:
            return value
        return TypeAdapter(strip_annotated(annotation)).validate_python(
            self._coerce_items(value, annotation),
            strict=False,
        )

    def _coerce_items(self, value: Any, annotation: Any) -> Any:
        """Coerce scalar items of list, set, tuple and dict values toward their declared kinds."""
        info = type_info_for_annotation(annotation)
        if info.kind is Kind.SCALAR:
            if scalar_kind_of(value) is ScalarKind.OTHER:
                return value
            return ValueCoercer(value).coerce_to(info.scalar_kind)

        origin = get_origin(info.origin)
        args = get_args(info.origin)
        if origin in _SEQUENCE_ORIGINS and len(args) == 1 and isinstance(value, _SEQUENCES):
            return [self._coerce_items(item, args[0]) for item in value]
        if origin is tuple and args and isinstance(value, _SEQUENCES):
            if len(args) == 2 and args[1] is Ellipsis:  # noqa: PLR2004
                return [self._coerce_items(item, args[0]) for item in value]
            if len(args) == len(value):
                return [self._coerce_items(item, arg) for item, arg in zip(value, args, strict=True)]
            return value
        if origin is dict and len(args) == 2 and isinstance(value, Mapping):  # noqa: PLR2004
            key_type, value_type = args
            return {
                self._coerce_items(key, key_type): self._coerce_items(item, value_type)
                for key, item in value.items()
            }
        return value


__all__ = ["WeakDecoder"]

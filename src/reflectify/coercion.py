"""Best-effort conversion between the primitive kinds ``int``, ``str`` and ``bool``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from reflectify.types import ScalarKind


def scalar_kind_of(value: Any) -> ScalarKind:
    """Return the primitive kind of a value; ``bool`` wins over ``int``."""
    if isinstance(value, bool):
        return ScalarKind.BOOLEAN
    if isinstance(value, int):
        return ScalarKind.INTEGER
    if isinstance(value, str):
        return ScalarKind.TEXT
    return ScalarKind.OTHER


def scalar_kind_of_type(tp: Any) -> ScalarKind:
    """Return the primitive kind described by a type, ``OTHER`` for non-scalars."""
    if not isinstance(tp, type):
        return ScalarKind.OTHER
    if issubclass(tp, bool):
        return ScalarKind.BOOLEAN
    if issubclass(tp, int):
        return ScalarKind.INTEGER
    if issubclass(tp, str):
        return ScalarKind.TEXT
    return ScalarKind.OTHER


@dataclass(frozen=True, slots=True)
class ValueCoercer:
    """Convert one value between text, integer and boolean.

    Every conversion is total: unparsable input falls back to ``0`` or
    ``False`` instead of raising.

    Examples:
        .. code-block:: python

            ValueCoercer("42").as_integer()  # 42
            ValueCoercer(0).as_boolean()  # False
            ValueCoercer(True).as_text()  # "true"

    """

    value: Any

    @property
    def kind(self) -> ScalarKind:
        return scalar_kind_of(self.value)

    def as_text(self) -> str:
        kind = self.kind
        if kind is ScalarKind.BOOLEAN:
            return "true" if self.value else "false"
        if kind is ScalarKind.INTEGER:
            return str(int(self.value))
        if kind is ScalarKind.TEXT:
            return self.value
        return str(self.value)

    def as_integer(self) -> int:
        kind = self.kind
        if kind is ScalarKind.BOOLEAN:
            return 1 if self.value else 0
        if kind is ScalarKind.TEXT:
            return _parse_base10(self.value)
        if kind is ScalarKind.INTEGER:
            return int(self.value)
        return 0

    def as_boolean(self) -> bool:
        kind = self.kind
        if kind is ScalarKind.BOOLEAN:
            return bool(self.value)
        if kind is ScalarKind.INTEGER:
            return self.value > 0
        if kind is ScalarKind.TEXT:
            return self.value != ""
        return False

    def coerce_to(self, target: ScalarKind) -> Any:
        """Convert toward ``target``; ``ScalarKind.OTHER`` returns the value untouched."""
        if target is ScalarKind.INTEGER:
            return self.as_integer()
        if target is ScalarKind.TEXT:
            return self.as_text()
        if target is ScalarKind.BOOLEAN:
            return self.as_boolean()
        return self.value


def _parse_base10(text: str) -> int:
    # int() also accepts surrounding whitespace and "_" separators; base-10 digits only here
    stripped = text[1:] if text[:1] in {"+", "-"} else text
    if not stripped.isascii() or not stripped.isdigit():
        return 0
    return int(text, 10)

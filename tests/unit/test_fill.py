from __future__ import annotations

import logging

import pytest

from reflectify import ReflectifyDecodeError, ReflectifyInvalidTargetError, reflect
from reflectify.settings import ReflectifySettings
from tests.structs import (
    Account,
    Badge,
    Counter,
    Customer,
    FrozenCustomer,
    Money,
    Point,
    Profile,
    Ticket,
)


def test_fill_struct_value_leaves_original_untouched() -> None:
    original = Account()
    descriptor = reflect(original)

    result = descriptor.fill({"owner": "test"})

    assert result.owner == "test"
    assert descriptor.element is result
    assert original.owner == ""


def test_fill_pointer_mutates_in_place() -> None:
    original = Account()

    result = reflect(original, by_reference=True).fill({"owner": "test"})

    assert result is original
    assert original.owner == "test"


def test_fill_coerces_primitive_kinds() -> None:
    result = reflect(Account()).fill({"owner": 7, "balance": "42", "active": 1})

    assert result.owner == "7"
    assert result.balance == 42
    assert result.active is True


def test_fill_ignores_unknown_keys_and_keeps_missing_fields() -> None:
    result = reflect(Account(owner="kept", balance=3)).fill({"unknown": "x", "balance": True})

    assert result.owner == "kept"
    assert result.balance == 1


def test_fill_matches_keys_case_insensitively() -> None:
    result = reflect(Account()).fill({"Owner": "ada", "BALANCE": "5"})

    assert result.owner == "ada"
    assert result.balance == 5


def test_exact_key_wins_over_case_insensitive_match() -> None:
    result = reflect(Account()).fill({"OWNER": "loose", "owner": "exact"})

    assert result.owner == "exact"


def test_fill_decodes_nested_structs_from_mappings() -> None:
    result = reflect(Account()).fill({"profile": {"nickname": "ace", "karma": "9"}})

    assert result.profile == Profile(nickname="ace", karma=9)


def test_fill_keeps_nested_struct_instances() -> None:
    profile = Profile(nickname="ace")

    result = reflect(Account()).fill({"profile": profile})

    assert result.profile is profile


def test_fill_validates_containers_leniently() -> None:
    result = reflect(Account()).fill({"tags": ("a", "b")})

    assert result.tags == ["a", "b"]


def test_fill_coerces_scalar_items_of_containers() -> None:
    result = reflect(Account()).fill({"tags": ["a", 1, True]})

    assert result.tags == ["a", "1", "true"]


def test_fill_coerces_items_of_nested_structs() -> None:
    result = reflect(Account()).fill({"profile": {"nickname": 7, "karma": "3"}})

    assert result.profile == Profile(nickname="7", karma=3)


def test_fill_drops_undecodable_values(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="reflectify"):
        result = reflect(Account(tags=["kept"])).fill({"tags": 5, "owner": "ada"})

    assert result.tags == ["kept"]
    assert result.owner == "ada"
    assert "Dropping undecodable value 5 for field 'tags'" in caplog.text


def test_fill_raises_on_undecodable_values_when_configured() -> None:
    settings = ReflectifySettings(raise_on_decode_error=True)

    with pytest.raises(ReflectifyDecodeError) as exc_info:
        reflect(Account(), settings=settings).fill({"tags": 5})

    assert exc_info.value.field == "tags"
    assert exc_info.value.value == 5


def test_fill_on_non_struct_is_rejected() -> None:
    with pytest.raises(ReflectifyInvalidTargetError):
        reflect(5).fill({"a": 1})


class TestStructFlavours:
    def test_named_tuple_is_rebuilt(self) -> None:
        original = Point(1, 2)

        result = reflect(original).fill({"x": "5"})

        assert result == Point(5, 2)
        assert original == Point(1, 2)

    def test_frozen_dataclass_is_rebuilt(self) -> None:
        original = Money(amount=1)

        result = reflect(original, by_reference=True).fill({"amount": "250", "currency": "USD"})

        assert result == Money(amount=250, currency="USD")
        assert original == Money(amount=1)

    def test_attrs_class_is_filled(self) -> None:
        ticket = Ticket(code="a")

        result = reflect(ticket, by_reference=True).fill({"seats": "3"})

        assert result is ticket
        assert ticket.seats == 3

    def test_frozen_attrs_class_is_rebuilt(self) -> None:
        result = reflect(Badge(holder="ada")).fill({"level": "2"})

        assert result == Badge(holder="ada", level=2)

    def test_pydantic_model_is_filled(self) -> None:
        result = reflect(Customer()).fill({"name": 12, "age": "30", "vip": "yes"})

        assert result == Customer(name="12", age=30, vip=True)

    def test_frozen_pydantic_model_is_rebuilt(self) -> None:
        result = reflect(FrozenCustomer()).fill({"age": "30"})

        assert result == FrozenCustomer(age=30)

    def test_plain_class_is_filled(self) -> None:
        counter = Counter(1, "a")

        result = reflect(counter, by_reference=True).fill({"count": "8", "label": False})

        assert result is counter
        assert counter.count == 8
        assert counter.label == "false"

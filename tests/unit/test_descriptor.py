from __future__ import annotations

import pytest

from reflectify import Kind, Ref, TypeDescriptor, reflect
from reflectify.settings import ReflectifySettings
from tests.structs import Account, Customer, Point, Profile, greet


def make_report(title: str) -> str:
    return title


def test_reflect_of_descriptor_describes_the_same_value() -> None:
    descriptor = reflect(make_report)
    descriptor.add_resolver(lambda parameter, argument: (argument, True))

    rewrapped = reflect(descriptor)

    assert not rewrapped.is_struct()
    assert rewrapped.is_function()
    assert rewrapped.value is make_report
    assert len(rewrapped.params()) == 1
    assert rewrapped.resolvers == ()


def test_rewrap_keeps_pointer_ness(account: Account) -> None:
    rewrapped = reflect(reflect(account, by_reference=True))

    assert rewrapped.is_pointer()
    assert rewrapped.element is account


class TestInstanceOf:
    def test_same_struct_type_is_instance(self) -> None:
        assert reflect(Account()).instance_of(Account(owner="other"))

    def test_pointer_is_not_instance_of_value(self) -> None:
        assert not reflect(Account(), by_reference=True).instance_of(Account())

    def test_value_is_not_instance_of_pointer(self) -> None:
        assert not reflect(Account()).instance_of(Account(), by_reference=True)

    def test_pointer_is_instance_of_pointer(self) -> None:
        descriptor = reflect(Account(), by_reference=True)

        assert descriptor.instance_of(Account(), by_reference=True)
        assert descriptor.instance_of(Ref[Account])
        assert descriptor.instance_of(Account, by_reference=True)

    def test_struct_classes_and_descriptors_are_accepted(self) -> None:
        descriptor = reflect(Account())

        assert descriptor.instance_of(Account)
        assert descriptor.instance_of(reflect(Account()))
        assert not descriptor.instance_of(Profile)

    def test_different_types_are_not_instances(self) -> None:
        assert not reflect(Account()).instance_of(Customer())
        assert not reflect(1).instance_of("1")


def test_is_struct_covers_values_and_pointers() -> None:
    assert reflect(Account()).is_struct()
    assert reflect(Account(), by_reference=True).is_struct()
    assert not reflect(make_report).is_struct()


def test_is_scalar() -> None:
    assert reflect("").is_scalar()
    assert reflect(0).is_scalar()
    assert reflect(False).is_scalar()
    assert not reflect(0.5).is_scalar()
    assert not reflect(Account()).is_scalar()


def test_never_struct_and_scalar_at_once() -> None:
    for value in (Account(), "x", 1, make_report, None, Point(1, 2)):
        descriptor = reflect(value)
        assert not (descriptor.is_struct() and descriptor.is_scalar())


class TestNames:
    def test_struct_name(self, account: Account) -> None:
        assert reflect(account).name == "Account"

    def test_pointer_name_is_the_struct_name(self, account: Account) -> None:
        assert reflect(account, by_reference=True).name == "Account"

    def test_function_name(self) -> None:
        assert reflect(make_report).name == "make_report"

    def test_method_value_name(self) -> None:
        assert reflect(Account.describe).name == "describe"
        assert reflect(Account().describe).name == "describe"

    def test_lambda_name_is_synthetic(self) -> None:
        assert reflect(lambda: None).name == "<lambda>"

    def test_scalar_name(self) -> None:
        assert reflect(3).name == "int"


class TestFullName:
    def test_struct_full_name_includes_module(self) -> None:
        assert reflect(Account()).full_name == "tests.structs.Account"

    def test_pointer_full_name_includes_module(self) -> None:
        assert reflect(Account(), by_reference=True).full_name == "tests.structs.Account"

    def test_method_value_full_name(self) -> None:
        assert reflect(Account.describe).full_name == "tests.structs.Account:describe"

    def test_bound_method_full_name(self) -> None:
        assert reflect(Account().greet).full_name == "tests.structs.Account:greet"

    def test_function_full_name(self) -> None:
        assert reflect(greet).full_name == "tests.structs.greet"

    def test_anonymous_function_full_name(self) -> None:
        full_name = reflect(lambda: None).full_name

        assert full_name.endswith("test_anonymous_function_full_name.<locals>.<lambda>")


def test_element_is_the_wrapped_value() -> None:
    account = Account(owner="hello")

    assert reflect(account).element is account


class TestNew:
    def test_new_returns_zero_instance(self) -> None:
        descriptor = reflect(Account(owner="hello", balance=5, tags=["a"]))

        zero = descriptor.new()

        assert zero == Account()

    def test_new_replaces_element(self) -> None:
        original = Account(owner="hello")
        descriptor = reflect(original)

        zero = descriptor.new()

        assert descriptor.element is zero
        assert descriptor.element.owner == ""
        assert original.owner == "hello"

    def test_new_for_pointer_is_never_none(self) -> None:
        assert isinstance(reflect(Account(), by_reference=True).new(), Account)

    def test_new_for_scalars(self) -> None:
        assert reflect(7).new() == 0
        assert reflect("seven").new() == ""
        assert reflect(True).new() is False

    def test_new_for_annotation_descriptor(self) -> None:
        descriptor = TypeDescriptor.for_annotation(Ref[Profile])

        assert descriptor.kind is Kind.POINTER
        assert descriptor.element == Profile()


class TestMethods:
    def test_struct_methods_are_listed(self) -> None:
        methods = reflect(Account()).methods()

        assert sorted(methods) == ["deposit", "describe", "greet"]

    def test_private_methods_follow_settings(self) -> None:
        settings = ReflectifySettings(include_private_methods=True)

        methods = reflect(Account(), settings=settings).methods()

        assert "_audit" in methods
        assert "__init__" not in methods

    def test_method_params_skip_the_receiver(self) -> None:
        params = reflect(Account()).methods()["deposit"].params()

        assert len(params) == 1
        assert params[0].is_scalar()
        assert params[0].parameter_name == "amount"

    def test_function_methods_return_itself(self) -> None:
        descriptor = reflect(lambda: None)

        methods = descriptor.methods()

        assert len(methods) == 1
        assert methods["<lambda>"] is descriptor

    def test_scalars_have_no_methods(self) -> None:
        assert reflect(5).methods() == {}


def test_params_of_struct_are_empty() -> None:
    assert reflect(Account()).params() == []


def test_params_follow_declaration_order() -> None:
    def handler(account: Ref[Account], amount: int, *extra: int, note: str = "", **rest: str) -> None:
        pass

    params = reflect(handler).params()

    assert [param.parameter_name for param in params] == ["account", "amount", "note"]
    assert [param.kind for param in params] == [Kind.POINTER, Kind.SCALAR, Kind.SCALAR]
    assert params[0].element == Account()


class TestMethodByName:
    def test_returns_struct_method(self) -> None:
        method = reflect(Account()).method_by_name("deposit")

        assert method is not None
        assert method.has_receiver()

    def test_function_returns_itself_for_any_name(self) -> None:
        descriptor = reflect(lambda: "test")

        method = descriptor.method_by_name("deposit")

        assert method is descriptor
        assert method.call().value == "test"

    def test_missing_method_is_none(self) -> None:
        assert reflect(Account()).method_by_name("does_not_exist") is None

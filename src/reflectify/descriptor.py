from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from reflectify._internal.callables import (
    DeclaredParameter,
    callable_module,
    callable_name,
    callable_qualname,
    declared_parameters,
    owner_qualname,
)
from reflectify._internal.decoding import WeakDecoder
from reflectify._internal.type_checks import (
    TypeInfo,
    is_struct_type,
    type_info_for_annotation,
    type_info_for_value,
    zero_value,
)
from reflectify.exceptions import ReflectifyInvalidTargetError, ReflectifyMethodNotFoundError
from reflectify.invocation import CallResult, InvocationEngine
from reflectify.markers import Ref, is_ref_annotation
from reflectify.receivers import has_receiver, method_table
from reflectify.resolution import ParameterResolutionChain, fallback_resolver
from reflectify.settings import ReflectifySettings, get_settings
from reflectify.types import UNSET, Kind, ParamResolver, ScalarKind, Unset

_ENGINE = InvocationEngine()


class TypeDescriptor:
    """Wrap one value together with its runtime type information.

    A descriptor answers questions about the value (name, kind, parameters,
    methods), builds zero values of its type, fills structs from loosely typed
    mappings and invokes callables while resolving missing arguments through
    its resolver chain.

    Descriptors are independent: each ``reflect`` call creates a new one, and
    the resolver chain and working element are owned by that descriptor only.
    They are not meant to be shared between threads.

    Examples:
        .. code-block:: python

            def greet(name: str, times: int) -> str:
                return " ".join([f"hello {name}"] * times)

            descriptor = reflect(greet)
            descriptor.call("ada", "2").value  # 'hello ada hello ada'

    """

    def __init__(
        self,
        value: Any,
        type_info: TypeInfo,
        *,
        settings: ReflectifySettings | None = None,
        default_resolver: ParamResolver | None = fallback_resolver,
        is_receiver: bool = False,
        parameter_name: str | None = None,
        owner: type[Any] | None = None,
    ) -> None:
        self._value = value
        self._type_info = type_info
        self._settings = settings
        self._chain = ParameterResolutionChain()
        self._element = value
        self._is_receiver = is_receiver
        self._parameter_name = parameter_name
        self._owner = owner
        self.default_resolver = default_resolver
        """Resolver appended after the registered ones for every call; ``None`` disables it."""

    @classmethod
    def for_annotation(
        cls,
        annotation: Any,
        *,
        settings: ReflectifySettings | None = None,
    ) -> TypeDescriptor:
        """Describe a type from its annotation, wrapping a zero value of it."""
        return cls(zero_value(annotation), type_info_for_annotation(annotation), settings=settings)

    def __repr__(self) -> str:
        return f"TypeDescriptor({self.full_name}, kind={self.kind.value})"

    @property
    def value(self) -> Any:
        """The value the descriptor was created for."""
        return self._value

    @property
    def element(self) -> Any:
        """The current working instance; starts as ``value`` and is replaced by ``new``."""
        return self._element

    @property
    def type_info(self) -> TypeInfo:
        return self._type_info

    @property
    def kind(self) -> Kind:
        return self._type_info.kind

    @property
    def scalar_kind(self) -> ScalarKind:
        return self._type_info.scalar_kind

    @property
    def settings(self) -> ReflectifySettings:
        return self._settings if self._settings is not None else get_settings()

    @property
    def is_receiver(self) -> bool:
        """Whether this parameter descriptor stands for the receiver of a method value."""
        return self._is_receiver

    @property
    def parameter_name(self) -> str | None:
        """Name of the parameter this descriptor was built for, ``None`` otherwise."""
        return self._parameter_name

    @property
    def resolvers(self) -> tuple[ParamResolver, ...]:
        return tuple(self._chain)

    @property
    def name(self) -> str:
        """Unqualified name of the callable, or of the type for everything else."""
        if self.kind is Kind.FUNCTION:
            return callable_name(self._value)
        origin = self._type_info.origin
        return getattr(origin, "__name__", None) or repr(origin)

    @property
    def full_name(self) -> str:
        """Qualified name; method values render as ``<module>.<Owner>:<method>``."""
        if self.kind is Kind.FUNCTION:
            module = callable_module(self._value)
            owner = owner_qualname(self._value)
            if owner is not None:
                return f"{module}.{owner}:{self.name}"
            return f"{module}.{callable_qualname(self._value)}"
        origin = self._type_info.origin
        module = getattr(origin, "__module__", None)
        qualname = getattr(origin, "__qualname__", None)
        if module is None or qualname is None:
            return self.name
        return f"{module}.{qualname}"

    def is_function(self) -> bool:
        return self.kind is Kind.FUNCTION

    def is_struct(self) -> bool:
        """Whether the value is a struct, held by value or by reference."""
        return self.kind in (Kind.STRUCT, Kind.POINTER)

    def is_pointer(self) -> bool:
        return self.kind is Kind.POINTER

    def is_scalar(self) -> bool:
        return self.kind is Kind.SCALAR

    def instance_of(self, other: Any, *, by_reference: bool = False) -> bool:
        """Return whether ``other`` has the same type name and the same pointer-ness.

        ``other`` may be a descriptor, a struct class, a ``Ref[...]``
        annotation or a value; values are described with ``by_reference``.
        A struct held by value is never an instance of the same struct held by
        reference.
        """
        if isinstance(other, TypeDescriptor):
            candidate = other
        elif is_ref_annotation(other):
            candidate = TypeDescriptor(None, type_info_for_annotation(other))
        elif is_struct_type(other):
            annotation = Ref[other] if by_reference else other
            candidate = TypeDescriptor(None, type_info_for_annotation(annotation))
        else:
            candidate = reflect(other, by_reference=by_reference)
        return candidate.name == self.name and candidate.is_pointer() == self.is_pointer()

    def new(self) -> Any:
        """Replace the working element with a zero value of the type and return it."""
        self._element = zero_value(self._type_info.annotation)
        return self._element

    def fill(self, source: Mapping[str, Any]) -> Any:
        """Weakly decode ``source`` into the working element and return it.

        A struct held by value is filled on a copy, which becomes the new
        working element; the original object is left alone. A struct held by
        reference is filled in place. Immutable structs are always rebuilt.

        Args:
            source: Mapping of field names to loosely typed values.

        Raises:
            ReflectifyInvalidTargetError: The descriptor does not wrap a struct.
            ReflectifyDecodeError: A value cannot be decoded and
                ``raise_on_decode_error`` is enabled.

        """
        if not self.is_struct():
            msg = f"Cannot fill {self.full_name}: it is not a struct."
            raise ReflectifyInvalidTargetError(msg)
        target = self._element if self.is_pointer() else copy.copy(self._element)
        decoder = WeakDecoder(raise_on_error=self.settings.raise_on_decode_error)
        self._element = decoder.decode(source, target)
        return self._element

    def methods(self) -> dict[str, TypeDescriptor]:
        """Return method descriptors keyed by name.

        A callable returns itself under its own name. A struct returns the
        methods of its class, each taking the receiver as first parameter.
        """
        if self.is_function():
            return {self.name: self}
        if not self.is_struct():
            return {}
        table = method_table(
            self._type_info.origin,
            include_private=self.settings.include_private_methods,
        )
        owner = self._type_info.origin
        return {name: self._derive(method, owner=owner) for name, method in table.items()}

    def method_by_name(self, name: str) -> TypeDescriptor | None:
        """Return the named method, ``None`` when missing; a callable returns itself."""
        if self.is_function():
            return self
        return self.methods().get(name)

    def has_receiver(self) -> bool:
        """Whether the first declared parameter is the receiver of a method value."""
        return self.is_function() and has_receiver(self._value, owner=self._owner)

    def declared_parameters(self) -> list[DeclaredParameter]:
        if not self.is_function():
            return []
        return declared_parameters(self._value, owner=self._owner)

    def parameter_descriptor(
        self,
        declared: DeclaredParameter,
        *,
        is_receiver: bool = False,
    ) -> TypeDescriptor:
        """Build a fresh zero-valued descriptor for one declared parameter."""
        return TypeDescriptor(
            zero_value(declared.type_info.annotation),
            declared.type_info,
            settings=self._settings,
            is_receiver=is_receiver,
            parameter_name=declared.name,
        )

    def params(self) -> list[TypeDescriptor]:
        """Return one descriptor per declared parameter, without the receiver."""
        declared = self.declared_parameters()
        if declared and self.has_receiver():
            declared = declared[1:]
        return [self.parameter_descriptor(parameter) for parameter in declared]

    def add_resolver(self, resolver: ParamResolver) -> None:
        """Register a resolver; resolvers are consulted in registration order."""
        self._chain.add(resolver)

    def resolution_chain(self) -> ParameterResolutionChain:
        """Return the chain used for one call: registered resolvers, then the default one."""
        return self._chain.with_fallback(self.default_resolver)

    def call(self, *args: Any) -> CallResult:
        """Invoke the callable, resolving every declared parameter.

        Raises:
            ReflectifyInvalidTargetError: The descriptor does not wrap a callable.

        """
        if not self.is_function():
            msg = f"Cannot call {self.full_name}: it is not callable."
            raise ReflectifyInvalidTargetError(msg)
        return _ENGINE.invoke(self, args)

    def call_method(self, name: str, *args: Any) -> CallResult:
        """Invoke the named method bound to the working element.

        A callable ignores ``name`` and is called directly. Registered resolvers
        carry over to the method call. A missing method yields a failed result
        holding ``ReflectifyMethodNotFoundError``.
        """
        if self.is_function():
            return self.call(*args)
        if self.method_by_name(name) is None:
            return CallResult.failure(ReflectifyMethodNotFoundError(name, self.full_name))
        method = self._derive(getattr(self._element, name))
        method._chain.extend(self._chain)
        return method.call(*args)

    def _derive(self, value: Any, *, owner: type[Any] | None = None) -> TypeDescriptor:
        return TypeDescriptor(
            value,
            type_info_for_value(value),
            settings=self._settings,
            default_resolver=self.default_resolver,
            owner=owner,
        )


def reflect(
    value: Any,
    *,
    by_reference: bool = False,
    settings: ReflectifySettings | None = None,
    default_resolver: ParamResolver | Unset | None = UNSET,
) -> TypeDescriptor:
    """Wrap a value into a new ``TypeDescriptor``.

    Wrapping a descriptor again yields an equivalent descriptor over the same
    value and type, with an empty resolver chain of its own.

    Args:
        value: Function, method, class, struct instance or scalar to describe.
        by_reference: Describe a struct instance as held by reference
            (``Kind.POINTER``) instead of by value.
        settings: Settings for this descriptor and the descriptors derived from
            it. Defaults to ``get_settings()``.
        default_resolver: Resolver appended last on every call. ``None``
            disables the fallback.

    Examples:
        .. code-block:: python

            descriptor = reflect(User(name="ada"))
            descriptor.name  # 'User'
            descriptor.fill({"name": "grace", "age": "36"})

    """
    if isinstance(value, TypeDescriptor):
        return TypeDescriptor(
            value.value,
            value.type_info,
            settings=settings if settings is not None else value._settings,  # noqa: SLF001
            default_resolver=(
                value.default_resolver if default_resolver is UNSET else default_resolver
            ),
            owner=value._owner,  # noqa: SLF001
        )
    return TypeDescriptor(
        value,
        type_info_for_value(value, by_reference=by_reference),
        settings=settings,
        default_resolver=fallback_resolver if default_resolver is UNSET else default_resolver,
    )


__all__ = ["TypeDescriptor", "reflect"]

from __future__ import annotations

import logging
import types
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from typing_extensions import Self

from reflectify._internal.callables import DeclaredParameter
from reflectify._internal.type_checks import is_runtime_class

if TYPE_CHECKING:
    from reflectify.descriptor import TypeDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CallResult:
    """Outcome of ``TypeDescriptor.call``: the callable's return value or a resolver error.

    A result unpacks into the ``(value, error)`` pair, so both styles work:

    Examples:
        .. code-block:: python

            result = descriptor.call("42")
            if result.ok:
                print(result.value)

            value, error = descriptor.call("42")

    """

    value: Any = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: Any) -> Self:
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> Self:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, raising the error of a failed result."""
        if self.error is not None:
            raise self.error
        return self.value

    def __iter__(self) -> Iterator[Any]:
        yield self.value
        yield self.error


@dataclass(frozen=True, slots=True)
class ResolvedParameter:
    """A declared parameter paired with the value resolved for it."""

    declared: DeclaredParameter
    descriptor: TypeDescriptor
    value: Any

    @property
    def carries_error(self) -> bool:
        """Whether the value is an error rather than an argument the parameter accepts.

        A parameter annotated with an exception type, or a union holding one,
        receives matching exception values as ordinary arguments.
        """
        if not isinstance(self.value, BaseException):
            return False
        origin = self.declared.type_info.origin
        members = get_args(origin) if get_origin(origin) in (Union, types.UnionType) else (origin,)
        accepted = tuple(
            member for member in members if member is not Any and is_runtime_class(member)
        )
        if not accepted:
            return True
        return not isinstance(self.value, accepted)


class InvocationEngine:
    """Assemble the arguments of a callable descriptor and invoke it."""

    def build_arguments(
        self,
        descriptor: TypeDescriptor,
        raw_arguments: Iterable[Any],
    ) -> list[ResolvedParameter]:
        """Resolve every declared parameter, left to right.

        Each parameter gets a fresh zero-valued descriptor. The first one is
        flagged as the receiver when the callable has one.

        Args:
            descriptor: Descriptor wrapping the callable.
            raw_arguments: Positional arguments given by the caller.

        """
        chain = descriptor.resolution_chain()
        remaining = deque(raw_arguments)
        with_receiver = descriptor.has_receiver()

        resolved: list[ResolvedParameter] = []
        for declared in descriptor.declared_parameters():
            parameter = descriptor.parameter_descriptor(
                declared,
                is_receiver=with_receiver and declared.position == 0,
            )
            resolved.append(
                ResolvedParameter(
                    declared=declared,
                    descriptor=parameter,
                    value=chain.resolve(parameter, remaining),
                ),
            )
        return resolved

    def invoke(self, descriptor: TypeDescriptor, raw_arguments: Iterable[Any]) -> CallResult:
        """Resolve the arguments and call the wrapped callable.

        When a resolved value is an error, the callable is not called and the
        error is returned as a failed ``CallResult``. Exceptions raised by the
        callable itself propagate.
        """
        resolved = self.build_arguments(descriptor, raw_arguments)

        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for item in resolved:
            if item.carries_error:
                logger.debug(
                    "Skipping call of %s: parameter '%s' resolved to %r",
                    descriptor.full_name,
                    item.declared.name,
                    item.value,
                )
                return CallResult.failure(item.value)
            if item.declared.keyword_only:
                kwargs[item.declared.name] = item.value
            else:
                args.append(item.value)

        return CallResult.success(descriptor.value(*args, **kwargs))


__all__ = ["CallResult", "InvocationEngine", "ResolvedParameter"]

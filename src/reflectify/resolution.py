from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from reflectify.coercion import ValueCoercer
from reflectify.types import MISSING, UNSET, ParamResolver

if TYPE_CHECKING:
    from reflectify.descriptor import TypeDescriptor

logger = logging.getLogger(__name__)


def fallback_resolver(parameter: TypeDescriptor, argument: Any) -> tuple[Any, bool]:
    """Resolve a parameter from the raw argument, or its zero value when there is none.

    Scalar parameters receive the argument coerced toward their primitive kind.
    Other parameters receive the argument untouched. The argument is always
    consumed. A ``None`` argument counts as no argument.
    """
    zero = parameter.new()
    if argument is MISSING or argument is None:
        return zero, True
    if parameter.is_scalar():
        return ValueCoercer(argument).coerce_to(parameter.scalar_kind), True
    return argument, True


class ParameterResolutionChain:
    """Ordered resolvers consulted to materialize one invocation parameter.

    Resolvers are asked in registration order. The first one returning a value
    other than ``UNSET`` wins; if it reports the argument as consumed, the head
    raw argument is dropped for the parameters that follow. When every resolver
    declines, the head raw argument itself is used and stays in place.

    Examples:
        .. code-block:: python

            def user_resolver(parameter: TypeDescriptor, argument: Any) -> tuple[Any, bool]:
                if parameter.instance_of(User):
                    return load_user(argument), True
                return UNSET, False

            chain = ParameterResolutionChain([user_resolver])

    """

    def __init__(self, resolvers: Iterable[ParamResolver] = ()) -> None:
        self._resolvers: list[ParamResolver] = list(resolvers)

    def add(self, resolver: ParamResolver) -> None:
        """Append a resolver after the ones already registered."""
        self._resolvers.append(resolver)

    def extend(self, resolvers: Iterable[ParamResolver]) -> None:
        self._resolvers.extend(resolvers)

    def with_fallback(self, fallback: ParamResolver | None) -> ParameterResolutionChain:
        """Return a copy of the chain ending with ``fallback``; this chain is left untouched."""
        chain = ParameterResolutionChain(self._resolvers)
        if fallback is not None:
            chain.add(fallback)
        return chain

    def resolve(self, parameter: TypeDescriptor, arguments: deque[Any]) -> Any:
        """Resolve one parameter, popping the head of ``arguments`` when a resolver consumes it.

        Args:
            parameter: Descriptor of the parameter being materialized.
            arguments: Raw positional arguments not consumed yet.

        """
        argument = arguments[0] if arguments else MISSING
        for index, resolver in enumerate(self._resolvers):
            value, consumed = resolver(parameter, argument)
            if value is UNSET:
                continue
            if consumed and arguments:
                arguments.popleft()
            logger.debug(
                "Resolver #%d resolved parameter '%s' (%s), consumed=%s",
                index,
                parameter.parameter_name,
                parameter.name,
                consumed,
            )
            return value

        logger.debug(
            "No resolver accepted parameter '%s', passing raw argument",
            parameter.parameter_name,
        )
        return None if argument is MISSING else argument

    def __iter__(self) -> Iterator[ParamResolver]:
        return iter(self._resolvers)

    def __len__(self) -> int:
        return len(self._resolvers)


__all__ = ["ParameterResolutionChain", "fallback_resolver"]

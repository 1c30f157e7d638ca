from reflectify.coercion import ValueCoercer
from reflectify.descriptor import TypeDescriptor, reflect
from reflectify.exceptions import (
    ReflectifyDecodeError,
    ReflectifyError,
    ReflectifyInvalidTargetError,
    ReflectifyMethodNotFoundError,
)
from reflectify.invocation import CallResult, InvocationEngine
from reflectify.markers import Ref
from reflectify.resolution import ParameterResolutionChain, fallback_resolver
from reflectify.settings import ReflectifySettings, get_settings
from reflectify.types import MISSING, UNSET, Kind, ParamResolver, ScalarKind

__all__ = [
    "MISSING",
    "UNSET",
    "CallResult",
    "InvocationEngine",
    "Kind",
    "ParamResolver",
    "ParameterResolutionChain",
    "Ref",
    "ReflectifyDecodeError",
    "ReflectifyError",
    "ReflectifyInvalidTargetError",
    "ReflectifyMethodNotFoundError",
    "ReflectifySettings",
    "ScalarKind",
    "TypeDescriptor",
    "ValueCoercer",
    "fallback_resolver",
    "get_settings",
    "reflect",
]

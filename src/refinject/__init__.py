"""Reflective dependency injection.

Providers declare how to build the value for a token; a `ReflectiveInjector`
resolves them into a table of factories and builds objects on demand,
injecting constructor parameters from their type hints.

Exports:
- `ReflectiveInjector`, `Injector`: build and look up objects. `Injector.NULL`
  is the empty root of every injector hierarchy.
- `ClassProvider`, `ValueProvider`, `FactoryProvider`, `ExistingProvider`:
  provider declarations. A bare class is shorthand for a `ClassProvider`.
- `Inject`, `Optional`, `Self`, `SkipSelf`: parameter markers, used with
  ``typing.Annotated``.
- `InjectionToken`, `forward_ref`: tokens for non-class values and for classes
  declared later.
- `ReflectiveDependencyResolver`: collect the transitive class dependencies of
  a set of classes.
"""

from ._dependency import ReflectiveDependency
from ._errors import (
    AbstractProviderError,
    CyclicDependencyError,
    InjectionError,
    InstantiationError,
    InvalidProviderError,
    MixingMultiProvidersWithRegularProvidersError,
    NoAnnotationError,
    NoProviderError,
    OutOfBoundsError,
)
from ._factory import ReflectiveFactoryResolver, ResolvedReflectiveFactory, construct_dependencies
from ._graph import ReflectiveDependencyResolver, resolve_dependencies
from ._injector import THROW_IF_NOT_FOUND, Injector, ReflectiveInjector
from ._key import KeyRegistry, ReflectiveKey, stringify
from ._metadata import Inject, InjectionToken, Optional, Self, SkipSelf, forward_ref, is_forward_ref, resolve_forward_ref
from ._provider import ClassProvider, ExistingProvider, FactoryProvider, ProviderNormalizer, ValueProvider
from ._reflection import Reflector, injectable, reflector
from ._resolver import (
    ReflectiveProviderResolver,
    ResolvedReflectiveProvider,
    ResolvedReflectiveProvidersMerger,
    resolve_reflective_providers,
)


__all__ = [
    "THROW_IF_NOT_FOUND",
    "AbstractProviderError",
    "ClassProvider",
    "CyclicDependencyError",
    "ExistingProvider",
    "FactoryProvider",
    "Inject",
    "InjectionError",
    "InjectionToken",
    "Injector",
    "InstantiationError",
    "InvalidProviderError",
    "KeyRegistry",
    "MixingMultiProvidersWithRegularProvidersError",
    "NoAnnotationError",
    "NoProviderError",
    "Optional",
    "OutOfBoundsError",
    "ProviderNormalizer",
    "ReflectiveDependency",
    "ReflectiveDependencyResolver",
    "ReflectiveFactoryResolver",
    "ReflectiveInjector",
    "ReflectiveKey",
    "ReflectiveProviderResolver",
    "Reflector",
    "ResolvedReflectiveFactory",
    "ResolvedReflectiveProvider",
    "ResolvedReflectiveProvidersMerger",
    "Self",
    "SkipSelf",
    "ValueProvider",
    "construct_dependencies",
    "forward_ref",
    "injectable",
    "is_forward_ref",
    "reflector",
    "resolve_dependencies",
    "resolve_forward_ref",
    "resolve_reflective_providers",
    "stringify",
]

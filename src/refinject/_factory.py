from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._dependency import ReflectiveDependency
from ._errors import InvalidProviderError, NoAnnotationError
from ._key import ReflectiveKey
from ._metadata import Inject, InjectionToken, Optional, Self, SkipSelf, is_forward_ref, resolve_forward_ref
from ._provider import ClassProvider, ExistingProvider, FactoryProvider, ValueProvider
from ._reflection import normalize_markers, reflector


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ._provider import NormalizedProvider


@dataclass(frozen=True)
class ResolvedReflectiveFactory:
    """A factory plus the dependencies to pass it, positionally and in order."""

    factory: Callable[..., Any]
    dependencies: tuple[ReflectiveDependency, ...]


class ReflectiveFactoryResolver:
    @staticmethod
    def resolve(provider: NormalizedProvider) -> ResolvedReflectiveFactory:
        """Build the factory and dependency list of a single normalized provider."""
        factory_fn: Callable[..., Any]
        if isinstance(provider, ClassProvider):
            use_class = resolve_forward_ref(provider.use_class)
            factory_fn = reflector.factory(use_class)
            resolved_deps = _dependencies_for(use_class)
        elif isinstance(provider, ExistingProvider):
            factory_fn = _alias
            resolved_deps = (ReflectiveDependency.from_key(ReflectiveKey.get(provider.use_existing)),)
        elif isinstance(provider, FactoryProvider):
            factory_fn = provider.use_factory
            resolved_deps = construct_dependencies(provider.use_factory, provider.deps)
        elif isinstance(provider, ValueProvider):
            factory_fn = _constant(provider.use_value)
            resolved_deps = ()
        else:
            raise InvalidProviderError(provider)

        return ResolvedReflectiveFactory(factory_fn, resolved_deps)


def _alias(alias_instance: Any) -> Any:
    return alias_instance


def _constant(value: Any) -> Callable[[], Any]:
    def factory() -> Any:
        return value

    return factory


def construct_dependencies(
    type_or_func: Any,
    dependencies: Sequence[Any] | None = None,
) -> tuple[ReflectiveDependency, ...]:
    """Dependencies of a factory function.

    An explicit `dependencies` list is used as is, one entry per argument.
    Without one the function's own parameters are reflected like a class
    constructor.
    """
    if dependencies is None:
        return _dependencies_for(type_or_func)

    dependencies = [normalize_markers(t) for t in dependencies]
    params = [[t] for t in dependencies]
    return tuple(_extract_token(type_or_func, t, params) for t in dependencies)


def _dependencies_for(type_or_func: Any) -> tuple[ReflectiveDependency, ...]:
    params = reflector.parameters(type_or_func)
    if params is None:
        return ()

    # Partially annotated parameter lists are always a configuration error.
    if any(p is None for p in params):
        raise NoAnnotationError(type_or_func, params)

    return tuple(_extract_token(type_or_func, p, params) for p in params)


def _extract_token(type_or_func: Any, metadata: Any, params: Sequence[Any]) -> ReflectiveDependency:
    if not isinstance(metadata, (list, tuple)):
        token = metadata.token if isinstance(metadata, Inject) else metadata
        token = resolve_forward_ref(token)
        if token is None:
            raise NoAnnotationError(type_or_func, params)
        return _create_dependency(token, False, None)

    token = None
    optional = False
    visibility: Self | SkipSelf | None = None

    for param_metadata in metadata:
        if inspect.isclass(param_metadata) or isinstance(param_metadata, InjectionToken):
            token = param_metadata
        elif is_forward_ref(param_metadata):
            token = param_metadata
        elif isinstance(param_metadata, Inject):
            token = param_metadata.token
        elif isinstance(param_metadata, Optional):
            optional = True
        elif isinstance(param_metadata, (Self, SkipSelf)):
            visibility = param_metadata

    token = resolve_forward_ref(token)

    if token is None:
        raise NoAnnotationError(type_or_func, params)

    return _create_dependency(token, optional, visibility)


def _create_dependency(token: Any, optional: bool, visibility: Self | SkipSelf | None) -> ReflectiveDependency:
    return ReflectiveDependency(ReflectiveKey.get(token), optional, visibility)

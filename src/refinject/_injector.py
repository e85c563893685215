from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._errors import AbstractProviderError, CyclicDependencyError, InstantiationError, NoProviderError, OutOfBoundsError
from ._key import ReflectiveKey
from ._metadata import Self, SkipSelf
from ._resolver import resolve_reflective_providers


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ._dependency import ReflectiveDependency
    from ._factory import ResolvedReflectiveFactory
    from ._resolver import ResolvedReflectiveProvider

    T = TypeVar("T")


class _ThrowIfNotFound:
    def __repr__(self) -> str:
        return "THROW_IF_NOT_FOUND"


THROW_IF_NOT_FOUND: Any = _ThrowIfNotFound()

_UNDEFINED = object()


class Injector(ABC):
    """Retrieves objects by token.

    ``get`` raises `NoProviderError` when nothing is bound to the token,
    unless a `not_found_value` other than `THROW_IF_NOT_FOUND` is given, in
    which case that value is returned.
    """

    THROW_IF_NOT_FOUND: Any = THROW_IF_NOT_FOUND
    NULL: Injector

    @overload
    def get(self, token: type[T], not_found_value: Any = ...) -> T: ...

    @overload
    def get(self, token: Any, not_found_value: Any = ...) -> Any: ...

    @abstractmethod
    def get(self, token: Any, not_found_value: Any = THROW_IF_NOT_FOUND) -> Any: ...


class NullInjector(Injector):
    """Has no providers. The root of every injector hierarchy."""

    def get(self, token: Any, not_found_value: Any = THROW_IF_NOT_FOUND) -> Any:
        if not_found_value is THROW_IF_NOT_FOUND:
            raise NoProviderError(self, ReflectiveKey.get(token))
        return not_found_value

    def __repr__(self) -> str:
        return "NullInjector()"


Injector.NULL = NullInjector()


class ReflectiveInjector(Injector):
    """Injector built from resolved providers.

    Objects are created lazily on the first ``get`` and cached for the
    lifetime of the injector. Lookups that miss fall back to the parent.

    Example:
      class Engine: ...

      class Car:
          def __init__(self, engine: Engine):
              self.engine = engine

      injector = ReflectiveInjector.resolve_and_create([Car, Engine])
      car = injector.get(Car)
      assert car.engine is injector.get(Engine)

    """

    def __init__(self, providers: Sequence[ResolvedReflectiveProvider], parent: Injector | None = None) -> None:
        self._parent = parent
        self._providers: list[ResolvedReflectiveProvider] = list(providers)
        self._providers_by_id = {p.key.id: p for p in self._providers}
        self._objs: dict[int, Any] = {}
        self._constructing: set[int] = set()
        self._lock = threading.RLock()

    @staticmethod
    def resolve(providers: Sequence[Any]) -> list[ResolvedReflectiveProvider]:
        return resolve_reflective_providers(providers)

    @classmethod
    def resolve_and_create(cls, providers: Sequence[Any], parent: Injector | None = None) -> ReflectiveInjector:
        return cls.from_resolved_providers(cls.resolve(providers), parent)

    @classmethod
    def from_resolved_providers(
        cls,
        providers: Sequence[ResolvedReflectiveProvider],
        parent: Injector | None = None,
    ) -> ReflectiveInjector:
        injector = cls(providers, parent)
        logger.debug("Created %r", injector)
        return injector

    @property
    def parent(self) -> Injector | None:
        return self._parent

    def get(self, token: Any, not_found_value: Any = THROW_IF_NOT_FOUND) -> Any:
        return self._get_by_key(ReflectiveKey.get(token), None, not_found_value)

    def resolve_and_create_child(self, providers: Sequence[Any]) -> ReflectiveInjector:
        return self.create_child_from_resolved(ReflectiveInjector.resolve(providers))

    def create_child_from_resolved(self, providers: Sequence[ResolvedReflectiveProvider]) -> ReflectiveInjector:
        return type(self).from_resolved_providers(providers, self)

    def resolve_and_instantiate(self, provider: Any) -> Any:
        """Build `provider` in the context of this injector, without caching it."""
        return self.instantiate_resolved(ReflectiveInjector.resolve([provider])[0])

    def instantiate_resolved(self, provider: ResolvedReflectiveProvider) -> Any:
        return self._instantiate_provider(provider)

    def get_provider_at_index(self, index: int) -> ResolvedReflectiveProvider:
        if index < 0 or index >= len(self._providers):
            raise OutOfBoundsError(index)
        return self._providers[index]

    def _instantiate_provider(self, provider: ResolvedReflectiveProvider) -> Any:
        if provider.multi_provider:
            return [self._instantiate(provider, factory) for factory in provider.resolved_factories]
        return self._instantiate(provider, provider.resolved_factory)

    def _instantiate(self, provider: ResolvedReflectiveProvider, factory: ResolvedReflectiveFactory) -> Any:
        try:
            deps = [self._get_by_reflective_dependency(dep) for dep in factory.dependencies]
        except AbstractProviderError as e:
            e.add_key(self, provider.key)
            raise

        try:
            obj = factory.factory(*deps)
        except Exception as e:
            raise InstantiationError(self, e, provider.key) from e

        logger.debug("Instantiated %s", provider.key.display_name)
        return obj

    def _get_by_reflective_dependency(self, dep: ReflectiveDependency) -> Any:
        return self._get_by_key(dep.key, dep.visibility, None if dep.optional else THROW_IF_NOT_FOUND)

    def _get_by_key(self, key: ReflectiveKey, visibility: Self | SkipSelf | None, not_found_value: Any) -> Any:
        if key is _INJECTOR_KEY:
            return self

        if isinstance(visibility, Self):
            return self._get_by_key_self(key, not_found_value)

        return self._get_by_key_default(key, not_found_value, visibility)

    def _get_by_key_self(self, key: ReflectiveKey, not_found_value: Any) -> Any:
        obj = self._get_obj_by_key_id(key.id)
        if obj is not _UNDEFINED:
            return obj
        return self._throw_or_null(key, not_found_value)

    def _get_by_key_default(
        self,
        key: ReflectiveKey,
        not_found_value: Any,
        visibility: Self | SkipSelf | None,
    ) -> Any:
        inj: Injector | None = self._parent if isinstance(visibility, SkipSelf) else self

        while isinstance(inj, ReflectiveInjector):
            obj = inj._get_obj_by_key_id(key.id)  # noqa: SLF001
            if obj is not _UNDEFINED:
                return obj
            inj = inj._parent  # noqa: SLF001

        if inj is not None:
            return inj.get(key.token, not_found_value)

        return self._throw_or_null(key, not_found_value)

    def _get_obj_by_key_id(self, key_id: int) -> Any:
        with self._lock:
            if key_id in self._objs:
                return self._objs[key_id]

            provider = self._providers_by_id.get(key_id)
            if provider is None:
                return _UNDEFINED

            if key_id in self._constructing:
                raise CyclicDependencyError(self, provider.key)

            self._constructing.add(key_id)
            try:
                obj = self._instantiate_provider(provider)
            finally:
                self._constructing.discard(key_id)

            self._objs[key_id] = obj
            return obj

    def _throw_or_null(self, key: ReflectiveKey, not_found_value: Any) -> Any:
        if not_found_value is not THROW_IF_NOT_FOUND:
            return not_found_value
        raise NoProviderError(self, key)

    def __repr__(self) -> str:
        names = ", ".join(p.key.display_name for p in self._providers)
        return f"ReflectiveInjector(providers=[{names}])"


_INJECTOR_KEY = ReflectiveKey.get(Injector)

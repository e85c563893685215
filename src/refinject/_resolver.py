from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._errors import MixingMultiProvidersWithRegularProvidersError
from ._factory import ReflectiveFactoryResolver, ResolvedReflectiveFactory
from ._key import ReflectiveKey
from ._provider import ProviderNormalizer


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ._provider import NormalizedProvider


@dataclass
class ResolvedReflectiveProvider:
    """A provider ready for the injector: its key and its factories.

    Regular providers hold exactly one factory (`resolved_factory`); multi
    providers hold one per registration, in registration order.
    """

    key: ReflectiveKey
    resolved_factories: list[ResolvedReflectiveFactory]
    multi_provider: bool = False

    @property
    def resolved_factory(self) -> ResolvedReflectiveFactory:
        return self.resolved_factories[0]

    def __repr__(self) -> str:
        kind = "multi" if self.multi_provider else "regular"
        return f"ResolvedReflectiveProvider({self.key.display_name}, {kind}, factories={len(self.resolved_factories)})"


class ReflectiveProviderResolver:
    @staticmethod
    def resolve(provider: NormalizedProvider) -> ResolvedReflectiveProvider:
        # Rejects anything that is not a provider before its fields are read.
        factory = ReflectiveFactoryResolver.resolve(provider)
        return ResolvedReflectiveProvider(ReflectiveKey.get(provider.provide), [factory], bool(provider.multi))

    @staticmethod
    def shallow_clone(provider: ResolvedReflectiveProvider) -> ResolvedReflectiveProvider:
        """Copy `provider` with its own factory list.

        Merging appends to the factory list of multi providers; the copy keeps
        those appends away from the caller's instance.
        """
        return ResolvedReflectiveProvider(provider.key, list(provider.resolved_factories), provider.multi_provider)


class ResolvedReflectiveProvidersMerger:
    @staticmethod
    def merge(
        providers: Iterable[ResolvedReflectiveProvider],
        normalized_providers_map: dict[int, ResolvedReflectiveProvider] | None = None,
    ) -> dict[int, ResolvedReflectiveProvider]:
        """Merge providers into a table holding each key exactly once.

        Multi providers for the same key are concatenated in order. For regular
        providers the last registration wins, so base providers must come
        before the ones overriding them.
        """
        if normalized_providers_map is None:
            normalized_providers_map = {}

        for provider in providers:
            existing = normalized_providers_map.get(provider.key.id)
            if existing is not None:
                if provider.multi_provider != existing.multi_provider:
                    raise MixingMultiProvidersWithRegularProvidersError(existing, provider)
                if provider.multi_provider:
                    existing.resolved_factories.extend(provider.resolved_factories)
                else:
                    logger.debug("Provider for %s overrides an earlier registration", provider.key.display_name)
                    normalized_providers_map[provider.key.id] = provider
            else:
                if provider.multi_provider:
                    resolved_provider = ReflectiveProviderResolver.shallow_clone(provider)
                else:
                    resolved_provider = provider
                normalized_providers_map[provider.key.id] = resolved_provider

        return normalized_providers_map


def resolve_reflective_providers(providers: Sequence[Any]) -> list[ResolvedReflectiveProvider]:
    """Normalize, resolve and merge a list of providers."""
    normalized = ProviderNormalizer.normalize(providers)
    resolved = [ReflectiveProviderResolver.resolve(p) for p in normalized]
    resolved_provider_map = ResolvedReflectiveProvidersMerger.merge(resolved)
    return list(resolved_provider_map.values())

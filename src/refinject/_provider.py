"""Provider declarations.

A provider tells the injector how to produce the value for a token. There are
four kinds, plus a bare class as shorthand for ``ClassProvider(cls, cls)``:

- `ClassProvider`: construct `use_class`, injecting its constructor parameters;
- `ValueProvider`: return `use_value` as is;
- `FactoryProvider`: call `use_factory` with the resolved `deps`;
- `ExistingProvider`: alias to whatever `use_existing` resolves to.

Setting ``multi=True`` on several providers for the same token makes the
injector return a list with one value per provider.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from ._errors import InvalidProviderError


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence


@dataclass(frozen=True)
class ClassProvider:
    provide: Any
    use_class: Any
    multi: bool = False


@dataclass(frozen=True)
class ValueProvider:
    provide: Any
    use_value: Any
    multi: bool = False


@dataclass(frozen=True)
class FactoryProvider:
    provide: Any
    use_factory: Callable[..., Any]
    deps: Sequence[Any] | None = None
    multi: bool = False


@dataclass(frozen=True)
class ExistingProvider:
    provide: Any
    use_existing: Any
    multi: bool = False


NormalizedProvider = Union[ClassProvider, ValueProvider, FactoryProvider, ExistingProvider]  # noqa: UP007

_PROVIDER_TYPES = (ClassProvider, ValueProvider, FactoryProvider, ExistingProvider)

_MAPPING_KINDS: tuple[tuple[str, type], ...] = (
    ("use_class", ClassProvider),
    ("use_value", ValueProvider),
    ("use_factory", FactoryProvider),
    ("use_existing", ExistingProvider),
)


class ProviderNormalizer:
    @staticmethod
    def normalize(providers: Iterable[Any]) -> list[Any]:
        """Rewrite provider shorthand into provider dataclasses.

        - bare classes become ``ClassProvider(cls, cls)``;
        - mappings with a ``"provide"`` key become the dataclass matching
          their ``use_*`` key;
        - nested lists are flattened in place.

        Anything else is passed through; it is rejected when its factory is resolved.
        """
        res: list[Any] = []
        for provider in providers:
            if isinstance(provider, list):
                res.extend(ProviderNormalizer.normalize(provider))
            elif isinstance(provider, _PROVIDER_TYPES):
                res.append(provider)
            elif inspect.isclass(provider):
                res.append(ClassProvider(provide=provider, use_class=provider))
            elif isinstance(provider, Mapping) and "provide" in provider:
                res.append(_from_mapping(provider))
            else:
                res.append(provider)
        return res


def _from_mapping(provider: Mapping[str, Any]) -> Any:
    for field, kind in _MAPPING_KINDS:
        if field in provider:
            try:
                return kind(**provider)
            except TypeError as e:
                raise InvalidProviderError(provider) from e
    return provider

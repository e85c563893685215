from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._key import stringify


if TYPE_CHECKING:
    from collections.abc import Sequence

    from ._injector import Injector
    from ._key import ReflectiveKey
    from ._resolver import ResolvedReflectiveProvider


class InjectionError(RuntimeError):
    pass


def _find_first_closed_cycle(keys: Sequence[ReflectiveKey]) -> list[ReflectiveKey]:
    res: list[ReflectiveKey] = []
    for key in keys:
        if key in res:
            res.append(key)
            return res
        res.append(key)
    return res


def _construct_resolving_path(keys: Sequence[ReflectiveKey]) -> str:
    if len(keys) > 1:
        path = _find_first_closed_cycle(list(reversed(keys)))
        return " (" + " -> ".join(stringify(k.token) for k in path) + ")"
    return ""


class AbstractProviderError(InjectionError):
    """Base for errors raised while walking a chain of providers.

    Each injector the error passes through on its way out records the key it
    was constructing, so the message ends with the full resolving path,
    outermost first: ``No provider for Engine! (Car -> Engine)``.
    """

    def __init__(self, injector: Injector | None, key: ReflectiveKey) -> None:
        self.keys: list[ReflectiveKey] = [key]
        self.injectors: list[Injector | None] = [injector]
        super().__init__(self.construct_resolving_message(self.keys))

    def construct_resolving_message(self, keys: Sequence[ReflectiveKey]) -> str:
        raise NotImplementedError

    def add_key(self, injector: Injector | None, key: ReflectiveKey) -> None:
        self.injectors.append(injector)
        self.keys.append(key)
        self.args = (self.construct_resolving_message(self.keys),)

    @property
    def message(self) -> str:
        return str(self.args[0])


class NoProviderError(AbstractProviderError):
    def construct_resolving_message(self, keys: Sequence[ReflectiveKey]) -> str:
        first = stringify(keys[0].token)
        return f"No provider for {first}!{_construct_resolving_path(keys)}"


class CyclicDependencyError(AbstractProviderError):
    def construct_resolving_message(self, keys: Sequence[ReflectiveKey]) -> str:
        return f"Cannot instantiate cyclic dependency!{_construct_resolving_path(keys)}"


class InstantiationError(AbstractProviderError):
    """A factory raised while building an object.

    The factory's exception is kept on `original_exception` and chained as
    ``__cause__`` by the injector.
    """

    def __init__(self, injector: Injector | None, original_exception: BaseException, key: ReflectiveKey) -> None:
        self.original_exception = original_exception
        super().__init__(injector, key)

    @property
    def cause_key(self) -> ReflectiveKey:
        return self.keys[0]

    def construct_resolving_message(self, keys: Sequence[ReflectiveKey]) -> str:
        first = stringify(keys[0].token)
        return f"{self.original_exception}: Error during instantiation of {first}!{_construct_resolving_path(keys)}."


class InvalidProviderError(InjectionError):
    def __init__(self, provider: Any) -> None:
        self.provider = provider
        msg = f"Invalid provider - only instances of Provider and Type are allowed, got: {provider!r}"
        super().__init__(msg)


class NoAnnotationError(InjectionError):
    """A constructor or factory parameter has no token that can be injected."""

    def __init__(self, type_or_func: Any, params: Sequence[Any] | None) -> None:
        self.type_or_func = type_or_func
        self.params = params
        signature = []
        for parameter in params or ():
            if not parameter:
                signature.append("?")
            elif isinstance(parameter, (list, tuple)):
                signature.append(" ".join(stringify(p) for p in parameter))
            else:
                signature.append(stringify(parameter))

        name = stringify(type_or_func)
        msg = (
            f"Cannot resolve all parameters for '{name}'({', '.join(signature)}). "
            "Make sure that all the parameters are decorated with Inject or have valid type annotations "
            f"and that '{name}' is decorated with injectable."
        )
        super().__init__(msg)


class OutOfBoundsError(InjectionError):
    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Index {index} is out-of-bounds.")


class MixingMultiProvidersWithRegularProvidersError(InjectionError):
    def __init__(self, existing: ResolvedReflectiveProvider, conflicting: ResolvedReflectiveProvider) -> None:
        self.existing = existing
        self.conflicting = conflicting
        msg = f"Cannot mix multi providers and regular providers, got: {existing!r} {conflicting!r}"
        super().__init__(msg)

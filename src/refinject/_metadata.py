"""Parameter markers, injection tokens and forward references.

The markers are plain tagged values. They are attached to constructor
parameters through ``typing.Annotated`` (or listed in a factory provider's
``deps``) and pattern-matched by the dependency extractor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar


if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


class Inject:
    """Use `token` instead of the parameter's type hint."""

    def __init__(self, token: Any) -> None:
        self.token = token

    def __repr__(self) -> str:
        return f"Inject({self.token!r})"


class Optional:
    """Inject ``None`` when no provider is found."""

    def __repr__(self) -> str:
        return "Optional()"


class Self:
    """Only look for the dependency in the current injector."""

    def __repr__(self) -> str:
        return "Self()"


class SkipSelf:
    """Start looking for the dependency in the parent injector."""

    def __repr__(self) -> str:
        return "SkipSelf()"


class InjectionToken(Generic[T]):
    """A unique token for values that have no class of their own.

    Example:
      API_URL = InjectionToken("API_URL")
      injector = ReflectiveInjector.resolve_and_create([ValueProvider(API_URL, "http://x")])

    """

    def __init__(self, desc: str) -> None:
        self._desc = desc

    def __repr__(self) -> str:
        return f"InjectionToken {self._desc}"


def forward_ref(fn: Callable[[], T]) -> Callable[[], T]:
    """Mark `fn` as a deferred token, for classes that are not defined yet.

    Example:
      class Door:
          def __init__(self, lock: Annotated[object, Inject(forward_ref(lambda: Lock))]): ...

    """
    fn.__forward_ref__ = forward_ref  # type: ignore[attr-defined]
    return fn


def is_forward_ref(value: Any) -> bool:
    return callable(value) and getattr(value, "__forward_ref__", None) is forward_ref


def resolve_forward_ref(value: Any) -> Any:
    if is_forward_ref(value):
        return value()
    return value

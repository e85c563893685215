from __future__ import annotations

import inspect
import logging
import threading
import types
import typing
from typing import TYPE_CHECKING, Any, Annotated, TypeVar, get_args, get_origin, get_type_hints

from ._metadata import Optional, Self, SkipSelf


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    T = TypeVar("T")

_MARKER_CLASSES = (Optional, Self, SkipSelf)
_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class Reflector:
    """Reads per-parameter annotation lists for classes and functions.

    Metadata comes from two places, in order of precedence:

    - explicit registrations (`register` / `injectable`);
    - the type hints of ``__init__`` (for classes) or of the function itself.

    Each parameter maps to a list of annotations: the hinted type followed by
    any markers from ``typing.Annotated``. ``T | None`` adds an `Optional`
    marker. A parameter without a hint maps to ``None``.
    """

    def __init__(self) -> None:
        self._registrations: dict[Any, list[Any]] = {}
        self._lock = threading.RLock()

    def register(self, target: Any, parameters: Sequence[Any]) -> None:
        """Explicitly set the parameter metadata of a class or function.

        Example:
          reflector.register(Car, [[Engine], [Optional(), Radio]])

        """
        with self._lock:
            self._registrations[target] = [normalize_markers(p) for p in parameters]

    def parameters(self, target: Any) -> list[Any] | None:
        with self._lock:
            registered = self._registrations.get(target)
        if registered is not None:
            return list(registered)

        if inspect.isclass(target):
            return self._class_parameters(target)

        if callable(target):
            return _reflect_callable(target, skip_first=False)

        return None

    def factory(self, type_: type[T]) -> Callable[..., T]:
        def construct(*args: Any) -> T:
            return type_(*args)

        return construct

    def _class_parameters(self, cls: type) -> list[Any] | None:
        for klass in cls.__mro__:
            if klass is object:
                return None
            with self._lock:
                registered = self._registrations.get(klass)
            if registered is not None:
                return list(registered)
            if "__init__" in klass.__dict__:
                return _reflect_callable(klass.__dict__["__init__"], skip_first=True)
        return None


def _reflect_callable(func: Callable[..., Any], *, skip_first: bool) -> list[Any]:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return []

    hints = _get_type_hints(func)

    params = [p for p in sig.parameters.values() if p.kind in _POSITIONAL]
    if skip_first:
        params = params[1:]

    result: list[Any] = []
    for p in params:
        hint = hints.get(p.name, inspect.Parameter.empty)
        if p.default is not inspect.Parameter.empty and _keeps_default(hint):
            # positional call: every later parameter keeps its default too
            break

        if hint is inspect.Parameter.empty:
            result.append(None)
        else:
            result.append(_param_metadata(hint))

    return result


def _keeps_default(hint: Any) -> bool:
    if hint is inspect.Parameter.empty:
        return True
    return inspect.isclass(hint) and getattr(hint, "__module__", "") == "builtins"


def _param_metadata(hint: Any) -> list[Any]:
    if get_origin(hint) is Annotated:
        base, *extras = get_args(hint)
        return [*_param_metadata(base), *(_normalize_marker(e) for e in extras)]

    if _is_optional_union(hint):
        (inner,) = [a for a in get_args(hint) if a is not type(None)]
        return [*_param_metadata(inner), Optional()]

    return [hint]


def _is_optional_union(hint: Any) -> bool:
    if get_origin(hint) not in (typing.Union, types.UnionType):
        return False
    args = get_args(hint)
    return type(None) in args and len(args) == 2  # noqa: PLR2004


def _normalize_marker(value: Any) -> Any:
    if inspect.isclass(value) and issubclass(value, _MARKER_CLASSES):
        return value()
    return value


def normalize_markers(parameter: Any) -> Any:
    if isinstance(parameter, (list, tuple)):
        return [_normalize_marker(p) for p in parameter]
    return _normalize_marker(parameter)


def _get_type_hints(func: Callable[..., Any]) -> dict[str, Any]:
    try:
        hints = get_type_hints(func, include_extras=True)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s type hints", exc.name, getattr(func, "__qualname__", func))
        hints = {}

    return hints


reflector = Reflector()


def injectable(*parameters: Any) -> Callable[[type[T]], type[T]]:
    """Class decorator registering explicit constructor parameter metadata.

    Only needed when type hints cannot express the dependencies. Without
    arguments the class keeps using its type hints.

    Example:
      @injectable([Engine], [Optional(), Radio])
      class Car:
          def __init__(self, engine, radio): ...

    """

    def decorator(cls: type[T]) -> type[T]:
        if parameters:
            reflector.register(cls, parameters)
        return cls

    return decorator

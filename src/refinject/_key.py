from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any


def stringify(token: Any) -> str:
    """Human readable form of a token, used in error messages and reprs."""
    if isinstance(token, str):
        return token
    if token is None:
        return "None"
    name = getattr(token, "__name__", None)
    if isinstance(name, str):
        return name
    return repr(token)


@dataclass(frozen=True, eq=False)
class ReflectiveKey:
    """Stable integer identity for a token.

    Keys are created once per token by a `KeyRegistry` so `id` can be used as
    a map key in place of the token itself.
    """

    token: Any
    id: int

    @property
    def display_name(self) -> str:
        return stringify(self.token)

    @classmethod
    def get(cls, token: Any) -> ReflectiveKey:
        """Key for `token` from the default registry."""
        return _global_key_registry.get(token)

    @classmethod
    def number_of_keys(cls) -> int:
        return _global_key_registry.number_of_keys

    def __repr__(self) -> str:
        return f"ReflectiveKey({self.display_name}, id={self.id})"


_VALUE_TOKEN_TYPES = (str, int, float, bytes, bool, type(None))


def _lookup_key(token: Any) -> tuple[Any, Any]:
    # Primitives compare by value, everything else by identity. The key keeps
    # the token alive, so its id is never reused.
    if type(token) in _VALUE_TOKEN_TYPES:
        return type(token), token
    return object, id(token)


class KeyRegistry:
    def __init__(self) -> None:
        self._all_keys: dict[tuple[Any, Any], ReflectiveKey] = {}
        self._lock = threading.RLock()

    def get(self, token: Any) -> ReflectiveKey:
        if isinstance(token, ReflectiveKey):
            return token

        lookup = _lookup_key(token)
        with self._lock:
            key = self._all_keys.get(lookup)
            if key is None:
                key = ReflectiveKey(token, len(self._all_keys))
                self._all_keys[lookup] = key
            return key

    @property
    def number_of_keys(self) -> int:
        return len(self._all_keys)


_global_key_registry = KeyRegistry()

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from ._key import ReflectiveKey
    from ._metadata import Self, SkipSelf


@dataclass(frozen=True)
class ReflectiveDependency:
    """One resolved constructor or factory parameter."""

    key: ReflectiveKey
    optional: bool = False
    visibility: Self | SkipSelf | None = None

    @classmethod
    def from_key(cls, key: ReflectiveKey) -> ReflectiveDependency:
        return cls(key, False, None)

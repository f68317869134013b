"""Per-build memoisation of derived trees.

Each :class:`~brocade.core.composition.engine.CompositionEngine` owns one
``TreeCache``. Entries live exactly as long as the engine: there is no
invalidation besides constructing a new engine.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

CacheKey = Tuple[Hashable, ...]


def cache_key(kind: str, **options: Any) -> CacheKey:
    """Build a stable key from a step kind and its options.

    Option values must be hashable; lists and dicts are frozen.
    """
    return (kind, *sorted((name, _freeze(value)) for name, value in options.items()))


def _freeze(value: Any) -> Hashable:
    if isinstance(value, dict):
        return tuple(sorted((k, _freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0


class TreeCache:
    """Compute each keyed tree at most once."""

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, Any] = {}
        self.stats = CacheStats()

    def fetch(self, key: CacheKey, factory: Callable[[], T]) -> T:
        if key in self._entries:
            self.stats.hits += 1
            return self._entries[key]

        self.stats.misses += 1
        logger.debug("tree cache miss: %s", key)
        value = factory()
        self._entries[key] = value
        return value

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[CacheKey]:
        return list(self._entries)


__all__ = ["CacheKey", "CacheStats", "TreeCache", "cache_key"]

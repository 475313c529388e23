"""
Bounded in-process cache, the default adapter.
"""

import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from cachetools import TLRUCache

from .base import CacheAdapter

DEFAULT_MAX_SIZE = 10_000


@dataclass(frozen=True)
class _Entry:
    value: Any
    ttl: Optional[int]


def _time_to_use(key: str, entry: _Entry, now: float) -> float:
    if entry.ttl:
        return now + entry.ttl
    return math.inf


class InMemoryLRUCache(CacheAdapter):
    """LRU cache with per-entry expiry.

    Values are stored by reference, so a cached record is the same object the
    store returned.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, timer: Callable[[], float] = time.monotonic):
        self.max_size = max_size
        self._store: TLRUCache = TLRUCache(maxsize=max_size, ttu=_time_to_use, timer=timer)

    async def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None
        return entry.value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        self._store[key] = _Entry(value, ttl)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def clear_prefix(self, prefix: str) -> int:
        self._store.expire()
        keys = [key for key in list(self._store.keys()) if key.startswith(prefix)]
        for key in keys:
            self._store.pop(key, None)
        return len(keys)

    def __len__(self) -> int:
        self._store.expire()
        return len(self._store)

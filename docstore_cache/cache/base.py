"""
Async cache adapter contract.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheAdapter(ABC):
    """Key/value store used by the loaders.

    ``get`` returns ``None`` for an absent key. A stored ``NOT_FOUND`` is a
    cached negative result, not a miss. ``set`` without ``ttl`` (or with
    ``ttl=0``) keeps the entry until it is deleted or evicted.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value or None."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a value, expiring after ``ttl`` seconds when given."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""

    async def clear_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``; returns the count removed."""
        raise NotImplementedError(f"{type(self).__name__} cannot enumerate keys")

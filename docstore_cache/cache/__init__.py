"""
Async cache adapters.

The loaders only depend on ``CacheAdapter``; any object with async ``get``,
``set`` and ``delete`` works. ``clear_prefix`` is needed for collection
flushes.
"""

from shared.config import DataSourceConfig
from shared.errors import ConfigurationError
from .base import CacheAdapter
from .memory import InMemoryLRUCache
from .redis_cache import RedisCache


def build_cache(config: DataSourceConfig) -> CacheAdapter:
    """Build the cache adapter named by ``config.cache_backend``."""
    if config.cache_backend == "memory":
        return InMemoryLRUCache(max_size=config.memory_cache_max_size)
    if config.cache_backend == "redis":
        return RedisCache(config.redis_url)
    raise ConfigurationError(
        f"Unknown cache backend: {config.cache_backend}",
        details={"cache_backend": config.cache_backend},
    )


__all__ = ["CacheAdapter", "InMemoryLRUCache", "RedisCache", "build_cache"]

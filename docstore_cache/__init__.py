"""
Read-through/write-through caching and request batching for document store
collections.

- identifiers: well-formedness of record ids
- keys: namespaced cache keys
- cache: async cache adapters (in-process LRU, Redis)
- loaders: per-turn batching by id and by filter
- caching_methods: the public facade
- datasource: one named collection with its caching methods
"""

from .cache import CacheAdapter, InMemoryLRUCache, RedisCache, build_cache
from .caching_methods import CachingMethods, create_caching_methods
from .datasource import MongoDataSource
from .sentinels import NOT_FOUND

__all__ = [
    "CacheAdapter",
    "CachingMethods",
    "InMemoryLRUCache",
    "MongoDataSource",
    "NOT_FOUND",
    "RedisCache",
    "build_cache",
    "create_caching_methods",
]

"""
Caching facade over one document store collection.
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional

from shared.errors import ConfigurationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .cache import CacheAdapter, InMemoryLRUCache
from .identifiers import id_to_string, is_well_formed
from .keys import DEFAULT_NAMESPACE, collection_prefix
from .loaders import IdentifierLoader, QueryLoader
from .store import collection_name_of


class CachingMethods:
    """Public load/invalidate operations for one collection.

    ``ttl`` is in seconds; ``None`` or ``0`` means the result is not written
    to the cache. Results already cached by an earlier call are served to
    every caller until they expire or are invalidated.
    """

    def __init__(
        self,
        collection: Any,
        cache: Optional[CacheAdapter] = None,
        *,
        collection_name: Optional[str] = None,
        namespace: str = DEFAULT_NAMESPACE,
        debug: bool = False,
        allow_flushing_collection_cache: bool = False,
        memoize: bool = False,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.collection = collection
        self.collection_name = collection_name or collection_name_of(collection)
        self.cache = cache if cache is not None else InMemoryLRUCache()
        self.namespace = namespace
        self.debug = debug
        self.allow_flushing_collection_cache = allow_flushing_collection_cache
        self.logger = get_logger("datasource.caching").bind(collection=self.collection_name)

        loader_options: Dict[str, Any] = {
            "namespace": namespace,
            "memoize": memoize,
            "debug": debug,
            "metrics": metrics,
        }
        self.id_loader = IdentifierLoader(collection, self.collection_name, self.cache, **loader_options)
        self.query_loader = QueryLoader(collection, self.collection_name, self.cache, **loader_options)

    async def load_one_by_id(self, record_id: Any, ttl: Optional[int] = None) -> Any:
        """Load one record: the record, ``NOT_FOUND``, or ``None`` for a malformed id."""
        return await self.id_loader.load(record_id, ttl=ttl)

    async def load_many_by_ids(self, ids: List[Any], ttl: Optional[int] = None) -> List[Any]:
        """Load records for the well-formed ids, in first-occurrence order.

        Malformed ids are dropped and repeated ids yield one slot. All lookups
        share one batch, so at most one store query is made.
        """
        distinct: Dict[str, Any] = {}
        for record_id in ids:
            if is_well_formed(record_id):
                distinct.setdefault(id_to_string(record_id), record_id)
        return list(await asyncio.gather(
            *(self.id_loader.load(record_id, ttl=ttl) for record_id in distinct.values())
        ))

    async def load_many_by_query(self, query: Mapping[str, Any], ttl: Optional[int] = None) -> List[Dict[str, Any]]:
        """Load every record matching ``query``, in store order."""
        return await self.query_loader.load(query, ttl=ttl)

    async def delete_from_cache_by_id(self, id_or_query: Any) -> None:
        """Invalidate the cached result for an id or a filter document.

        The loader memo is cleared too, so the next load reaches the store.
        """
        if isinstance(id_or_query, Mapping):
            await self.query_loader.clear(id_or_query)
        else:
            await self.id_loader.clear(id_or_query)

    async def flush_collection_cache(self) -> Optional[bool]:
        """Drop every cached entry of this collection.

        Returns ``None`` without touching anything unless flushing was
        enabled at construction.
        """
        if not self.allow_flushing_collection_cache:
            self.logger.debug("Collection cache flush not permitted")
            return None

        self.id_loader.invalidate_all()
        self.query_loader.invalidate_all()

        prefix = collection_prefix(self.collection_name, self.namespace)
        try:
            removed = await self.cache.clear_prefix(prefix)
        except (AttributeError, NotImplementedError) as exc:
            raise ConfigurationError(
                "Cache adapter does not support collection flushes",
                details={"cache": type(self.cache).__name__},
            ) from exc
        self.logger.info("Flushed collection cache", prefix=prefix, keys_count=removed)
        return True


def create_caching_methods(
    collection: Any,
    cache: Optional[CacheAdapter] = None,
    **options: Any,
) -> CachingMethods:
    """Build the caching facade for ``collection``."""
    return CachingMethods(collection, cache, **options)

"""
Shared read-through/write-through plumbing for the collection loaders.
"""

import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..cache.base import CacheAdapter
from ..keys import DEFAULT_NAMESPACE
from ..store import fetch_all
from .batch import BatchLoader


class CachingLoader:
    """Async cache in front of a per-turn ``BatchLoader``.

    Cache reads and writes are best-effort: adapter errors are logged and
    counted, then the load carries on as a miss. Store errors are not
    caught here and reach every caller of the failing batch.

    Every invalidation bumps a generation for its cache key (a flush bumps
    all of them). A load only writes its result back when the generation it
    started under is still current, so a value read before an invalidation
    is never cached after it.
    """

    loader_name = "base"

    def __init__(
        self,
        collection: Any,
        collection_name: str,
        cache: CacheAdapter,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        memoize: bool = False,
        debug: bool = False,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.collection = collection
        self.collection_name = collection_name
        self.cache = cache
        self.namespace = namespace
        self.debug = debug
        self.metrics = metrics
        self.logger = get_logger(f"datasource.{self.loader_name}_loader").bind(collection=collection_name)
        self.batch_loader = BatchLoader(self._run_batch, key_fn=self.identity, memoize=memoize)
        self._epoch = 0
        self._generations: Dict[str, int] = {}

    def identity(self, key: Any) -> Any:
        """Deduplication identity of a batched key."""
        return key

    def build_query(self, keys: List[Any]) -> Mapping[str, Any]:
        """The single store filter covering ``keys``."""
        raise NotImplementedError

    def resolve(self, keys: List[Any], docs: List[Any]) -> Sequence[Any]:
        """Map the store's records back to one result per key, same order."""
        raise NotImplementedError

    def _trace(self, event: str, **fields: Any) -> None:
        if self.debug:
            self.logger.info(event, **fields)
        else:
            self.logger.debug(event, **fields)

    async def _run_batch(self, keys: List[Any]) -> Sequence[Any]:
        self._trace("Dispatching batch", batch_size=len(keys))
        query = self.build_query(keys)

        start = time.perf_counter()
        try:
            docs = await fetch_all(self.collection, query)
        except Exception as exc:
            self.logger.error("Store query failed", batch_size=len(keys), error=str(exc))
            self._record_batch(len(keys), time.perf_counter() - start, "error")
            raise
        self._record_batch(len(keys), time.perf_counter() - start, "success")

        try:
            return self.resolve(keys, docs)
        except Exception as exc:
            self.logger.error("Failed to resolve batch results", batch_size=len(keys), error=str(exc))
            raise

    def _record_batch(self, size: int, duration: float, status: str) -> None:
        if not self.metrics:
            return
        try:
            self.metrics.record_batch(self.loader_name, size, duration, status)
        except Exception as exc:  # pragma: no cover - metrics failures never break loads
            self.logger.debug("Failed to record batch metrics", error=str(exc))

    async def _safe_get(self, key: str) -> Optional[Any]:
        """Read a cache entry, treating adapter errors as a miss."""
        try:
            value = await self.cache.get(key)
        except Exception as exc:
            self.logger.error("Cache fetch error", cache_operation="get", key=key, error=str(exc))
            self._record_cache_error("get")
            return None

        self._trace("Cache hit" if value is not None else "Cache miss", key=key)
        if self.metrics:
            self.metrics.record_cache_lookup(self.loader_name, hit=value is not None)
        return value

    async def _safe_set(self, key: str, value: Any, ttl: Optional[int]) -> None:
        """Write a cache entry when ``ttl`` asks for one."""
        if not ttl or ttl <= 0:
            return
        try:
            await self.cache.set(key, value, ttl)
            self._trace("Cached value", key=key, ttl=ttl)
        except Exception as exc:
            self.logger.error("Cache store error", cache_operation="set", key=key, error=str(exc))
            self._record_cache_error("set")

    def _record_cache_error(self, operation: str) -> None:
        if self.metrics:
            self.metrics.record_cache_error(operation)

    def _generation(self, cache_key: str) -> Tuple[int, int]:
        return self._epoch, self._generations.get(cache_key, 0)

    async def read_through(self, cache_key: str, batch_key: Any, ttl: Optional[int]) -> Any:
        """Cache, then batch, then cache write."""
        generation = self._generation(cache_key)
        cached = await self._safe_get(cache_key)
        if cached is not None:
            return cached
        value = await self.batch_loader.load(batch_key)
        if self._generation(cache_key) != generation:
            self._trace("Skipping cache write, entry invalidated during load", key=cache_key)
            return value
        await self._safe_set(cache_key, value, ttl)
        return value

    async def invalidate(self, cache_key: str, batch_key: Any) -> None:
        """Drop both the async cache entry and the loader memo."""
        self._generations[cache_key] = self._generations.get(cache_key, 0) + 1
        self.batch_loader.clear(batch_key)
        await self.cache.delete(cache_key)
        self._trace("Invalidated cache entry", key=cache_key)

    def invalidate_all(self) -> None:
        """Forget every memoized load and stop in-flight loads from writing back."""
        self._epoch += 1
        self._generations.clear()
        self.batch_loader.clear_all()

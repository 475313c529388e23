"""
Named-collection data source.
"""

from typing import Any, List, Mapping, Optional

from shared.config import DataSourceConfig
from shared.errors import ConfigurationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .cache import CacheAdapter, build_cache
from .caching_methods import CachingMethods, create_caching_methods


class MongoDataSource:
    """Caching methods bound to exactly one named collection.

    ``collection`` is a one-entry mapping of name to driver collection, e.g.
    ``MongoDataSource({"users": db.users})``. Keyword options override the
    values in ``config``; without a cache, each data source builds its own
    from the config (an in-process LRU cache by default).
    """

    def __init__(
        self,
        collection: Mapping[str, Any],
        cache: Optional[CacheAdapter] = None,
        *,
        debug: Optional[bool] = None,
        allow_flushing_collection_cache: Optional[bool] = None,
        memoize: Optional[bool] = None,
        config: Optional[DataSourceConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        if not isinstance(collection, Mapping) or len(collection) != 1:
            raise ConfigurationError(
                "MongoDataSource must be given a mapping with a single collection",
                details={"received": type(collection).__name__},
            )

        config = config or DataSourceConfig()
        self.collection_name, self.collection = next(iter(collection.items()))
        self.logger = get_logger("datasource.mongo").bind(collection=self.collection_name)

        self.methods: CachingMethods = create_caching_methods(
            self.collection,
            cache if cache is not None else build_cache(config),
            collection_name=self.collection_name,
            namespace=config.cache_namespace,
            debug=config.debug if debug is None else debug,
            allow_flushing_collection_cache=(
                config.allow_flushing_collection_cache
                if allow_flushing_collection_cache is None
                else allow_flushing_collection_cache
            ),
            memoize=config.memoize_loads if memoize is None else memoize,
            metrics=metrics,
        )
        self.logger.debug("Data source ready", cache=type(self.methods.cache).__name__)

    @property
    def cache(self) -> CacheAdapter:
        return self.methods.cache

    async def load_one_by_id(self, record_id: Any, ttl: Optional[int] = None) -> Any:
        return await self.methods.load_one_by_id(record_id, ttl=ttl)

    async def load_many_by_ids(self, ids: List[Any], ttl: Optional[int] = None) -> List[Any]:
        return await self.methods.load_many_by_ids(ids, ttl=ttl)

    async def load_many_by_query(self, query: Mapping[str, Any], ttl: Optional[int] = None) -> List[Any]:
        return await self.methods.load_many_by_query(query, ttl=ttl)

    async def delete_from_cache_by_id(self, id_or_query: Any) -> None:
        await self.methods.delete_from_cache_by_id(id_or_query)

    async def flush_collection_cache(self) -> Optional[bool]:
        return await self.methods.flush_collection_cache()

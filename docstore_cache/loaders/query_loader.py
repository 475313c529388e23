"""
Batch-by-filter loader.
"""

from typing import Any, Dict, List, Mapping, Optional

from mongomock.filtering import filter_applies

from ..keys import query_key, serialize_query
from .base import CachingLoader


class QueryLoader(CachingLoader):
    """Collapses concurrent filter lookups into one ``$or`` query.

    The store does not say which disjunct matched a record, so the combined
    result is split by re-applying each filter locally with mongomock's
    filter engine. A record matching several filters appears in each of
    their results; each result keeps the store's order.
    """

    loader_name = "query"

    def identity(self, key: Any) -> Any:
        return serialize_query(key)

    def cache_key(self, query: Mapping[str, Any]) -> str:
        return query_key(self.collection_name, query, self.namespace)

    async def load(self, query: Mapping[str, Any], ttl: Optional[int] = None) -> List[Dict[str, Any]]:
        return await self.read_through(self.cache_key(query), query, ttl)

    def build_query(self, keys: List[Mapping[str, Any]]) -> Dict[str, Any]:
        return {"$or": list(keys)}

    def resolve(self, keys: List[Mapping[str, Any]], docs: List[Any]) -> List[List[Dict[str, Any]]]:
        return [[doc for doc in docs if filter_applies(query, doc)] for query in keys]

    async def clear(self, query: Mapping[str, Any]) -> None:
        await self.invalidate(self.cache_key(query), query)

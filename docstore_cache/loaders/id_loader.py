"""
Batch-by-identifier loader.
"""

from typing import Any, Dict, List, Optional

from ..identifiers import id_to_string, is_well_formed, lookup_values
from ..keys import id_key
from ..sentinels import NOT_FOUND
from .base import CachingLoader


class IdentifierLoader(CachingLoader):
    """Collapses concurrent single-record lookups into one ``$in`` query.

    Malformed identifiers resolve to ``None`` with no cache or store access.
    Well-formed identifiers the store does not know resolve to ``NOT_FOUND``,
    which is cached like any record when a ttl is given. An ``ObjectId`` and
    its hex string are the same request; the first form queued in a turn
    decides which ``_id`` values are queried.
    """

    loader_name = "id"

    def identity(self, key: Any) -> Any:
        return id_to_string(key)

    def cache_key(self, record_id: Any) -> str:
        return id_key(self.collection_name, record_id, self.namespace)

    async def load(self, record_id: Any, ttl: Optional[int] = None) -> Any:
        if not is_well_formed(record_id):
            self._trace("Skipping malformed identifier", record_id=repr(record_id))
            return None
        return await self.read_through(self.cache_key(record_id), record_id, ttl)

    def build_query(self, keys: List[Any]) -> Dict[str, Any]:
        values: List[Any] = []
        for key in keys:
            values.extend(lookup_values(key))
        return {"_id": {"$in": values}}

    def resolve(self, keys: List[Any], docs: List[Any]) -> List[Any]:
        by_id: Dict[str, Any] = {}
        for doc in docs:
            by_id.setdefault(id_to_string(doc.get("_id")), doc)
        return [by_id.get(id_to_string(key), NOT_FOUND) for key in keys]

    async def clear(self, record_id: Any) -> None:
        if not is_well_formed(record_id):
            return
        await self.invalidate(self.cache_key(record_id), record_id)

"""
Store access helpers.

The collection is any object whose ``find(query)`` returns a cursor. Motor
and the PyMongo async API expose an awaitable ``to_list(length)``; recent
synchronous PyMongo returns the list directly, and older drivers (and
mongomock) give a plain iterable cursor.
"""

import inspect
from typing import Any, Dict, List, Mapping


async def fetch_all(collection: Any, query: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Run ``query`` and drain the cursor."""
    cursor = collection.find(query)
    to_list = getattr(cursor, "to_list", None)
    if to_list is None:
        return list(cursor)
    result = to_list(None)
    if inspect.isawaitable(result):
        result = await result
    return list(result)


def collection_name_of(collection: Any) -> str:
    """Name of a driver collection (``name``) or a test double (``collection_name``)."""
    for attribute in ("name", "collection_name"):
        value = getattr(collection, attribute, None)
        if isinstance(value, str) and value:
            return value
    raise AttributeError(f"{type(collection).__name__} has no collection name")

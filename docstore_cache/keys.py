"""
Cache key derivation.

Keys have the form ``<namespace>:<collection>:<discriminator>`` where the
discriminator is either an identifier's string form or a serialized filter.
Filter serialization is order-sensitive: ``{"a": 1, "b": 2}`` and
``{"b": 2, "a": 1}`` produce different keys.
"""

from typing import Any, Mapping

from bson import json_util

from .identifiers import id_to_string

DEFAULT_NAMESPACE = "db:mongo"


def key_for(collection_name: str, discriminator: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Build a namespaced cache key."""
    return f"{namespace}:{collection_name}:{discriminator}"


def serialize_query(query: Mapping[str, Any]) -> str:
    """Stable serialization of a filter document (ObjectId and datetime aware)."""
    return json_util.dumps(query)


def id_key(collection_name: str, record_id: Any, namespace: str = DEFAULT_NAMESPACE) -> str:
    return key_for(collection_name, id_to_string(record_id), namespace)


def query_key(collection_name: str, query: Mapping[str, Any], namespace: str = DEFAULT_NAMESPACE) -> str:
    return key_for(collection_name, serialize_query(query), namespace)


def collection_prefix(collection_name: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Prefix shared by every key of one collection."""
    return f"{namespace}:{collection_name}:"

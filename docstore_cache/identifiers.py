"""
Identifier validation.

Only ``ObjectId`` instances and 24-character hex strings are well-formed.
Everything else (``None``, empty or short strings, non-hex characters, raw
12-byte values, numbers) is rejected before any cache or store access.
"""

import re
from typing import Any, List

from bson import ObjectId

_HEX_ID = re.compile(r"[0-9a-fA-F]{24}")


def is_well_formed(candidate: Any) -> bool:
    """Return True when ``candidate`` can be sent to the store as an ``_id``."""
    if isinstance(candidate, ObjectId):
        return True
    if isinstance(candidate, str):
        return _HEX_ID.fullmatch(candidate) is not None
    return False


def id_to_string(candidate: Any) -> str:
    """Canonical string form used for batching and cache keys."""
    if isinstance(candidate, str):
        return candidate.lower()
    return str(candidate)


def to_object_id(candidate: Any) -> ObjectId:
    """Convert a well-formed identifier to ``ObjectId``."""
    if isinstance(candidate, ObjectId):
        return candidate
    if not is_well_formed(candidate):
        raise ValueError(f"Malformed identifier: {candidate!r}")
    return ObjectId(candidate)


def lookup_values(candidate: Any) -> List[Any]:
    """``_id`` values to query for a well-formed identifier.

    Hex strings are sent both as ``ObjectId`` and verbatim, so collections
    that store string ``_id``s resolve too.
    """
    object_id = to_object_id(candidate)
    if isinstance(candidate, str):
        return [object_id, candidate]
    return [object_id]

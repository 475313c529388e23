"""
Per-turn batching loaders.
"""

from .batch import BatchLoader
from .id_loader import IdentifierLoader
from .query_loader import QueryLoader

__all__ = ["BatchLoader", "IdentifierLoader", "QueryLoader"]

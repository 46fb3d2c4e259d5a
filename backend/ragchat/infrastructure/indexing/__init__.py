"""Vector indexing infrastructure for retrieval."""

from .base import EmbeddingVector, SearchResult, VectorIndex
from .linear_search import LinearSearchIndex
from .manager import IndexManager, index_manager

__all__ = [
    "VectorIndex",
    "EmbeddingVector",
    "SearchResult",
    "LinearSearchIndex",
    "IndexManager",
    "index_manager",
]

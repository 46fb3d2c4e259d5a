"""Index management service for the embedding similarity index."""

import asyncio
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...modules.embedding.models import Embedding
from ..config import settings
from ..logging import get_logger
from .base import EmbeddingVector, SearchResult, VectorIndex
from .linear_search import LinearSearchIndex

logger = get_logger(__name__)


class IndexManager:
    """Owns the process-wide index over the embeddings table.

    The index is built lazily: the first search loads every stored
    embedding. Every later search first loads the rows stored since the
    previous load, so embeddings written by another process (the offline
    backfill, another worker) become searchable without a restart.
    Embeddings stored in this process are also pushed in directly by
    :meth:`add_vector`; vectors added before the first search are skipped
    since the load picks them up from the database anyway.
    """

    def __init__(self, dimension: Optional[int] = None):
        """Initialize the index manager.

        Args:
            dimension: Embedding dimension; taken from the first query if omitted
        """
        self._dimension = dimension
        self._index: Optional[VectorIndex] = None
        self._indexed_ids: Set[int] = set()
        self._last_loaded_id = 0
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    @property
    def dimension(self) -> Optional[int]:
        """Dimension of the index, if configured or already loaded."""
        if self._index is not None:
            return self._index.dimension
        return self._dimension

    async def get_index(self, db: AsyncSession, dimension: Optional[int] = None) -> VectorIndex:
        """Get the index, loading embeddings stored since the last call.

        Args:
            db: Database session for loading vectors
            dimension: Dimension to use if none was configured

        Returns:
            The up-to-date vector index
        """
        async with self._lock:
            if self._index is None:
                index_dimension = self._dimension or dimension
                if index_dimension is None:
                    raise ValueError("Embedding dimension is unknown")

                index = LinearSearchIndex(dimension=index_dimension)
                loaded = await self._load_vectors(index, db)
                self._index = index
                logger.info("Embedding index loaded", extra={"total_vectors": loaded, "dimension": index.dimension})
            else:
                loaded = await self._load_vectors(self._index, db)
                if loaded:
                    logger.info("Embedding index refreshed", extra={"new_vectors": loaded})

        return self._index

    async def search(self, query_embedding: List[float], k: int, db: AsyncSession) -> List[SearchResult]:
        """Find the k stored embeddings most similar to a query.

        Args:
            query_embedding: Query vector
            k: Number of results to return
            db: Database session used to pick up newly stored embeddings

        Returns:
            At most k results, most similar first
        """
        index = await self.get_index(db, dimension=len(query_embedding))
        return await index.search(query_embedding=query_embedding, k=k)

    async def add_vector(self, vector: EmbeddingVector) -> None:
        """Add a newly stored embedding to the index if it is loaded."""
        async with self._lock:
            if self._index is not None and vector.embedding_id not in self._indexed_ids:
                await self._index.add_vector(vector)
                self._indexed_ids.add(vector.embedding_id)

    async def reset(self) -> None:
        """Drop the loaded index; the next search reloads it."""
        async with self._lock:
            self._index = None
            self._indexed_ids = set()
            self._last_loaded_id = 0

    def get_index_stats(self) -> Optional[Dict[str, Any]]:
        """Get statistics for the index.

        Returns:
            Index statistics or None if the index isn't loaded
        """
        if self._index is None:
            return None

        stats = self._index.get_stats()
        result: Dict[str, Any] = {
            "total_vectors": stats.total_vectors,
            "embedding_dimension": stats.embedding_dimension,
        }

        if stats.algorithm_params:
            result.update(stats.algorithm_params)

        return result

    async def _load_vectors(self, index: VectorIndex, db: AsyncSession) -> int:
        """Load the embeddings stored after the last loaded one."""
        stmt = select(Embedding).where(Embedding.id > self._last_loaded_id).order_by(Embedding.id)
        result = await db.execute(stmt)
        embeddings = result.scalars().all()

        vectors = [
            EmbeddingVector(embedding_id=embedding.id, chunk_id=embedding.chunk_id, embedding=list(embedding.embedding))
            for embedding in embeddings
            if embedding.id not in self._indexed_ids
        ]

        if vectors:
            await index.add_vectors(vectors)
            self._indexed_ids.update(vector.embedding_id for vector in vectors)

        if embeddings:
            self._last_loaded_id = embeddings[-1].id

        return len(vectors)


index_manager = IndexManager(dimension=settings.EMBEDDING_DIMENSION)

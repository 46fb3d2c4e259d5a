"""Embedding storage service."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.indexing import EmbeddingVector, IndexManager, index_manager
from ...infrastructure.logging import get_logger
from ..chunk.services import ChunkService
from ..common.exceptions import ResourceNotFoundError, ValidationError
from .crud import embedding_crud
from .models import Embedding
from .schemas import EmbeddingStatus

logger = get_logger(__name__)


class EmbeddingService:
    """Service for storing chunk embeddings.

    Storing an embedding also links its chunk, and both writes share one
    transaction: a chunk never points at an embedding that wasn't stored,
    and an embedding is never stored for a chunk that was already linked.
    """

    def __init__(self, indexes: Optional[IndexManager] = None):
        self.chunk_service = ChunkService()
        self.indexes = indexes or index_manager

    async def add_embedding(
        self,
        chunk_id: int,
        vector: List[float],
        db: AsyncSession,
    ) -> int:
        """Store the embedding of a chunk and link the chunk to it.

        Args:
            chunk_id: Chunk the vector was computed from
            vector: Embedding vector
            db: Database session

        Returns:
            ID of the new embedding

        Raises:
            ValidationError: If the vector doesn't match the index dimension
            ResourceNotFoundError: If the chunk doesn't exist
            EmbeddingAlreadyLinkedError: If the chunk already has an embedding
        """
        dimension = self.indexes.dimension
        if dimension is not None and len(vector) != dimension:
            raise ValidationError(f"Embedding dimension {len(vector)} doesn't match index dimension {dimension}")

        if not await self.chunk_service.chunk_exists(chunk_id, db):
            raise ResourceNotFoundError(f"Chunk {chunk_id} not found")

        embedding = Embedding(chunk_id=chunk_id, embedding=list(vector))

        try:
            db.add(embedding)
            await db.flush()
            await self.chunk_service.link_embedding(chunk_id, embedding.id, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await self.indexes.add_vector(
            EmbeddingVector(embedding_id=embedding.id, chunk_id=chunk_id, embedding=embedding.embedding)
        )

        logger.debug("Embedding stored", extra={"chunk_id": chunk_id, "embedding_id": embedding.id})
        return embedding.id

    async def get_status(self, db: AsyncSession) -> EmbeddingStatus:
        """Report how many chunks still need an embedding."""
        stats = self.indexes.get_index_stats()

        return EmbeddingStatus(
            chunks_needing_embedding=await self.chunk_service.count_chunks_needing_embedding(db),
            embeddings=int(await embedding_crud.count(db=db)),
            indexed_vectors=stats["total_vectors"] if stats else None,
        )

"""Chunk lookups used by the embedding pipeline and the retrieval step."""

from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..common.exceptions import EmbeddingAlreadyLinkedError, ResourceNotFoundError
from .crud import chunk_crud
from .models import Chunk
from .schemas import ChunkRead

logger = get_logger(__name__)


class ChunkService:
    """Service for reading chunks and linking them to their embeddings.

    Chunks are created together with their document and mutated exactly
    once afterwards, when the embedding pipeline attaches an embedding.
    """

    async def get_chunks_by_document(
        self,
        document_id: int,
        db: AsyncSession,
    ) -> List[ChunkRead]:
        """Get all chunks of a document in insertion order.

        Args:
            document_id: Document ID to get chunks from
            db: Database session

        Returns:
            List of chunks
        """
        stmt = select(Chunk).where(Chunk.document_id == document_id).order_by(Chunk.id)
        result = await db.execute(stmt)
        return [ChunkRead.model_validate(chunk) for chunk in result.scalars().all()]

    async def get_chunks_needing_embedding(
        self,
        document_id: int,
        db: AsyncSession,
    ) -> List[ChunkRead]:
        """Get the chunks of a document that have no embedding yet.

        Args:
            document_id: Document ID to get chunks from
            db: Database session

        Returns:
            List of unembedded chunks in insertion order
        """
        chunks = await self.get_chunks_by_document(document_id, db)
        return [chunk for chunk in chunks if chunk.embedding_id is None]

    async def count_chunks_needing_embedding(self, db: AsyncSession) -> int:
        """Count chunks across all documents that are still unembedded."""
        stmt = select(func.count(Chunk.id)).where(Chunk.embedding_id.is_(None))
        return int((await db.execute(stmt)).scalar_one())

    async def get_chunks_by_embedding_ids(
        self,
        embedding_ids: List[int],
        db: AsyncSession,
    ) -> List[ChunkRead]:
        """Resolve embedding ids to their chunks, keeping the given order.

        Embedding ids without a linked chunk are skipped and logged.

        Args:
            embedding_ids: Embedding IDs, typically ranked search hits
            db: Database session

        Returns:
            Chunks in the order of ``embedding_ids``
        """
        if not embedding_ids:
            return []

        stmt = select(Chunk).where(Chunk.embedding_id.in_(embedding_ids))
        result = await db.execute(stmt)
        by_embedding_id = {chunk.embedding_id: chunk for chunk in result.scalars().all()}

        chunks = []
        for embedding_id in embedding_ids:
            chunk = by_embedding_id.get(embedding_id)
            if chunk is None:
                logger.warning("No chunk linked to embedding", extra={"embedding_id": embedding_id})
                continue
            chunks.append(ChunkRead.model_validate(chunk))

        return chunks

    async def link_embedding(
        self,
        chunk_id: int,
        embedding_id: int,
        db: AsyncSession,
    ) -> None:
        """Attach an embedding to a chunk without committing.

        Args:
            chunk_id: Chunk to patch
            embedding_id: Embedding to link
            db: Database session

        Raises:
            ResourceNotFoundError: If the chunk doesn't exist
            EmbeddingAlreadyLinkedError: If the chunk already has an embedding
        """
        chunk = await db.get(Chunk, chunk_id)
        if chunk is None:
            raise ResourceNotFoundError(f"Chunk {chunk_id} not found")

        if chunk.embedding_id is not None:
            raise EmbeddingAlreadyLinkedError(f"Chunk {chunk_id} is already linked to embedding {chunk.embedding_id}")

        chunk.embedding_id = embedding_id

    async def chunk_exists(self, chunk_id: int, db: AsyncSession) -> bool:
        """Check whether a chunk exists."""
        return bool(await chunk_crud.exists(db=db, id=chunk_id))

"""Backfill of embeddings for every unembedded chunk of the corpus."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.config import settings
from ...infrastructure.embedding import EmbeddingClient, get_embedding_client
from ...infrastructure.logging import get_logger
from ..chunk.schemas import ChunkRead
from ..chunk.services import ChunkService
from ..document.services import DocumentService
from .schemas import EmbedAllResult
from .services import EmbeddingService

logger = get_logger(__name__)


class EmbeddingPipeline:
    """Walks all documents page by page and embeds their new chunks.

    Every page costs one embedding request covering all unembedded chunks
    of the page's documents. The batch is not capped: a page of documents
    with many chunks becomes one very large request, and the API may
    reject it. Pages are processed one after the other.
    """

    def __init__(
        self,
        embedding_client: Optional[EmbeddingClient] = None,
        page_size: Optional[int] = None,
        embedding_service: Optional[EmbeddingService] = None,
    ):
        """Initialize the pipeline.

        Args:
            embedding_client: Client used to embed chunk texts
            page_size: Number of documents per page
            embedding_service: Service storing the resulting vectors
        """
        self.embedding_client = embedding_client or get_embedding_client()
        self.page_size = page_size or settings.EMBEDDING_PAGE_SIZE
        self.embedding_service = embedding_service or EmbeddingService()
        self.document_service = DocumentService()
        self.chunk_service = ChunkService()

    async def embed_all(self, db: AsyncSession) -> EmbedAllResult:
        """Embed every chunk that doesn't have an embedding yet.

        Args:
            db: Database session

        Returns:
            Pages walked, documents visited and chunks embedded
        """
        cursor: Optional[int] = None
        pages = documents = embedded = 0

        while True:
            page = await self.document_service.get_documents_page(db, cursor=cursor, num_items=self.page_size)
            pages += 1
            documents += len(page.page)

            embedded += await self.embed_documents([document.id for document in page.page], db)

            if page.is_done:
                break
            cursor = page.continue_cursor

        logger.info(
            "Embedding backfill finished", extra={"pages": pages, "documents": documents, "chunks_embedded": embedded}
        )
        return EmbedAllResult(pages=pages, documents=documents, chunks_embedded=embedded)

    async def embed_documents(self, document_ids: List[int], db: AsyncSession) -> int:
        """Embed the unembedded chunks of some documents with one request.

        Args:
            document_ids: Documents whose chunks to embed
            db: Database session

        Returns:
            Number of chunks embedded
        """
        chunks: List[ChunkRead] = []
        for document_id in document_ids:
            chunks.extend(await self.chunk_service.get_chunks_needing_embedding(document_id, db))

        if not chunks:
            return 0

        logger.info("Embedding chunks", extra={"documents": len(document_ids), "chunks": len(chunks)})
        vectors = await self.embedding_client.embed_texts([chunk.text for chunk in chunks])

        for chunk, vector in zip(chunks, vectors):
            await self.embedding_service.add_embedding(chunk.id, vector, db)

        return len(chunks)

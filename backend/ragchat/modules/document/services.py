"""Document management service."""

from typing import Any, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..chunk.models import Chunk
from .crud import document_crud
from .models import Document
from .schemas import DocumentCreate, DocumentPage, DocumentRead


class DocumentService:
    """Service for storing and walking documents.

    Documents are created together with their chunk texts; the chunks start
    without an embedding and are picked up later by the embedding pipeline,
    which walks every document with :meth:`get_documents_page`.
    """

    async def create_document(
        self,
        document_data: DocumentCreate,
        db: AsyncSession,
    ) -> DocumentRead:
        """Create a document and its unembedded chunks in one transaction.

        Args:
            document_data: Document text, optional url and chunk texts
            db: Database session

        Returns:
            Created document data with chunk count
        """
        document = Document(text=document_data.text, url=document_data.url)
        db.add(document)
        await db.flush()

        db.add_all([Chunk(document_id=document.id, text=chunk_text) for chunk_text in document_data.chunks])
        await db.commit()

        return DocumentRead(
            id=document.id,
            text=document.text,
            url=document.url,
            created_at=document.created_at,
            updated_at=document.updated_at,
            chunk_count=len(document_data.chunks),
        )

    async def get_document(
        self,
        document_id: int,
        db: AsyncSession,
    ) -> Optional[DocumentRead]:
        """Get a specific document with chunk count.

        Args:
            document_id: Document ID to retrieve
            db: Database session

        Returns:
            Document data with chunk count, None if it doesn't exist
        """
        stmt = await document_crud.select(id=document_id)
        result = await db.execute(self._with_chunk_count(stmt))
        row = result.first()

        if not row:
            return None

        return self._to_read(row)

    async def get_documents_page(
        self,
        db: AsyncSession,
        cursor: Optional[int] = None,
        num_items: int = 20,
    ) -> DocumentPage:
        """Get one page of documents in insertion order.

        The cursor is the id of the last document of the previous page;
        ``None`` starts from the beginning. One extra row is read to know
        whether the walk is finished.

        Args:
            db: Database session
            cursor: Continuation cursor returned by the previous page
            num_items: Maximum number of documents in the page

        Returns:
            Page of documents with continuation cursor and is-done flag
        """
        if num_items < 1:
            raise ValueError("num_items must be positive")

        stmt = select(Document)
        if cursor is not None:
            stmt = stmt.where(Document.id > cursor)
        stmt = self._with_chunk_count(stmt).order_by(Document.id).limit(num_items + 1)

        result = await db.execute(stmt)
        rows = result.fetchall()

        documents = [self._to_read(row) for row in rows[:num_items]]
        is_done = len(rows) <= num_items
        continue_cursor = documents[-1].id if documents else cursor

        return DocumentPage(page=documents, continue_cursor=continue_cursor, is_done=is_done)

    def _with_chunk_count(self, stmt: Select[Any]) -> Select[Any]:
        return (
            stmt.add_columns(func.count(Chunk.id).label("chunk_count"))
            .outerjoin(Chunk, Document.id == Chunk.document_id)
            .group_by(Document.id)
        )

    def _to_read(self, row: Any) -> DocumentRead:
        document = row.Document if hasattr(row, "Document") else row
        return DocumentRead(
            id=document.id,
            text=document.text,
            url=document.url,
            created_at=document.created_at,
            updated_at=document.updated_at,
            chunk_count=row.chunk_count,
        )

"""Document API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from ....modules.document.schemas import DocumentCreate, DocumentRead
from ....modules.document.services import DocumentService
from ..dependencies import DbSession, get_document_service

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create New Document",
    description="""
    Stores a document together with its chunks.

    Chunks are stored without embeddings; run the embedding backfill to make
    them searchable.

    - **text**: Full document text
    - **url**: Optional source of the document
    - **chunks**: Chunk texts, already split by the caller
    """,
    responses={
        201: {"description": "Document created successfully"},
        422: {"description": "Invalid document data"},
    },
    response_description="The created document with chunk count",
)
async def create_document(
    document_data: DocumentCreate,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentRead:
    """Create a new document."""
    return await document_service.create_document(document_data, db)


@router.get(
    "/{document_id}",
    summary="Get Document Details",
    description="Retrieves a document by ID together with its chunk count.",
    responses={
        200: {"description": "Document details with chunk count"},
        404: {"description": "Document not found"},
    },
)
async def get_document(
    document_id: int,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentRead:
    """Get a specific document by ID."""
    result = await document_service.get_document(document_id, db)
    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return result

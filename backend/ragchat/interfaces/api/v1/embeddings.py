"""Embedding backfill API endpoints."""

from fastapi import APIRouter, Depends

from ....modules.embedding.pipeline import EmbeddingPipeline
from ....modules.embedding.schemas import EmbedAllResult, EmbeddingStatus
from ....modules.embedding.services import EmbeddingService
from ..dependencies import DbSession, get_embedding_pipeline, get_embedding_service

router = APIRouter(prefix="/embeddings", tags=["Embeddings"])


@router.post(
    "/embed-all",
    summary="Embed All Chunks",
    description="""Embed every chunk that has no embedding yet.

    Walks all documents in pages and sends one embedding request per page,
    covering every unembedded chunk of the page. Already embedded chunks are
    left alone, so the call can be repeated after new documents arrive.
    """,
    responses={
        200: {"description": "Backfill finished"},
        502: {"description": "The embedding API failed"},
    },
)
async def embed_all(
    db: DbSession,
    pipeline: EmbeddingPipeline = Depends(get_embedding_pipeline),
) -> EmbedAllResult:
    """Run the embedding backfill."""
    return await pipeline.embed_all(db)


@router.get(
    "/status",
    summary="Get Embedding Status",
    description="Counts the chunks that still need an embedding and the embeddings stored so far.",
    responses={
        200: {"description": "Embedding status"},
    },
)
async def get_embedding_status(
    db: DbSession,
    service: EmbeddingService = Depends(get_embedding_service),
) -> EmbeddingStatus:
    """Get the embedding status of the corpus."""
    return await service.get_status(db)

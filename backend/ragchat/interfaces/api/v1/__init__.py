from fastapi import APIRouter

from .documents import router as documents_router
from .embeddings import router as embeddings_router
from .sessions import router as sessions_router

router = APIRouter(prefix="/v1")
router.include_router(documents_router)
router.include_router(embeddings_router)
router.include_router(sessions_router)


@router.get(
    "/health",
    summary="API Health Check",
    description="Simple health check endpoint for monitoring and container orchestration.",
    responses={
        200: {"description": "API is healthy and responding"},
    },
)
async def health_check():
    """Health check endpoint for Docker health checks."""
    return {"status": "healthy", "message": "RAG Chat API is running"}

from ..infrastructure.app_factory import create_application
from ..infrastructure.config.settings import get_settings
from ..interfaces.api import router as api_router

settings = get_settings()

app = create_application(
    router=api_router,
    settings=settings,
    title="RAG Chat API",
    summary="Retrieval-augmented chat over your documents",
    description="""
    # RAG Chat API

    Answers chat messages using the documents stored in the service as
    context.

    ## Flow

    1. Store documents with their chunks (`POST /api/v1/documents`)
    2. Embed new chunks (`POST /api/v1/embeddings/embed-all`)
    3. Write a user message (`POST /api/v1/sessions/{session_id}/messages`)
    4. Ask for the answer (`POST /api/v1/sessions/{session_id}/answer`)

    Embeddings and completions come from the MiniMax APIs.
    """,
    version="0.1.0",
)

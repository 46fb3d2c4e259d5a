"""FastAPI dependencies for use in API endpoints."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database import async_session
from ...modules.chat.services import ChatService
from ...modules.document.services import DocumentService
from ...modules.embedding.pipeline import EmbeddingPipeline
from ...modules.embedding.services import EmbeddingService
from ...modules.message.services import MessageService

DbSession = Annotated[AsyncSession, Depends(async_session)]


def get_document_service() -> DocumentService:
    """Dependency for providing a DocumentService instance."""
    return DocumentService()


def get_message_service() -> MessageService:
    """Dependency for providing a MessageService instance."""
    return MessageService()


def get_embedding_service() -> EmbeddingService:
    """Dependency for providing an EmbeddingService instance."""
    return EmbeddingService()


def get_embedding_pipeline() -> EmbeddingPipeline:
    """Dependency for providing an EmbeddingPipeline instance."""
    return EmbeddingPipeline()


def get_chat_service() -> ChatService:
    """Dependency for providing a ChatService instance."""
    return ChatService()

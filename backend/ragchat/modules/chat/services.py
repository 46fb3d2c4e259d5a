"""Retrieval and answer services for chat sessions."""

from typing import List, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.chat import ChatClient, get_chat_client
from ...infrastructure.config import settings
from ...infrastructure.embedding import EmbeddingClient, get_embedding_client
from ...infrastructure.indexing import SearchResult, index_manager
from ...infrastructure.logging import get_logger, reset_correlation_id, set_correlation_id
from ..chunk.services import ChunkService
from ..common.constants import APOLOGY_MESSAGE, FALLBACK_MESSAGE
from ..common.exceptions import ResourceNotFoundError
from ..message.services import MessageService
from .schemas import AnswerResponse, RetrievalResult

logger = get_logger(__name__)


class VectorSearch(Protocol):
    async def search(self, query_embedding: List[float], k: int, db: AsyncSession) -> List[SearchResult]: ...


class RetrievalService:
    """Finds the chunks relevant to the latest message of a session.

    The last message of the history is the query. Its embedding is matched
    against the stored embeddings and the top hits are resolved to chunk
    texts, keeping the ranking of the search.
    """

    def __init__(
        self,
        embedding_client: Optional[EmbeddingClient] = None,
        vector_search: Optional[VectorSearch] = None,
        top_k: Optional[int] = None,
    ):
        self.embedding_client = embedding_client or get_embedding_client()
        self.vector_search = vector_search or index_manager
        self.top_k = top_k or settings.RETRIEVAL_TOP_K
        self.message_service = MessageService()
        self.chunk_service = ChunkService()

    async def retrieve(self, session_id: str, db: AsyncSession) -> RetrievalResult:
        """Load a session's history and the documents relevant to it.

        Args:
            session_id: Session to answer
            db: Database session

        Returns:
            Full history plus at most ``top_k`` chunk texts, most relevant first

        Raises:
            ResourceNotFoundError: If the session has no messages
        """
        messages = await self.message_service.get_messages(session_id, db)
        if not messages:
            raise ResourceNotFoundError(f"Session {session_id} has no messages")

        query = messages[-1].text
        query_embedding = await self.embedding_client.embed_text(query)

        hits = await self.vector_search.search(query_embedding, self.top_k, db)
        chunks = await self.chunk_service.get_chunks_by_embedding_ids([hit.embedding_id for hit in hits], db)

        logger.info("Retrieved documents", extra={"hits": len(hits), "documents": len(chunks)})
        return RetrievalResult(messages=messages, documents=[chunk.text for chunk in chunks])


class ChatService:
    """Answers the latest message of a session.

    One call writes exactly one bot message: it is created empty before the
    request goes out, rewritten with the growing answer while the reply
    streams in, and given its final text at the end. If anything fails
    after the message exists, the message gets the fallback text and the
    error is re-raised.
    """

    def __init__(
        self,
        retrieval: Optional[RetrievalService] = None,
        chat_client: Optional[ChatClient] = None,
        message_service: Optional[MessageService] = None,
    ):
        self.retrieval = retrieval or RetrievalService()
        self.chat_client = chat_client or get_chat_client()
        self.message_service = message_service or MessageService()

    async def answer(self, session_id: str, db: AsyncSession) -> AnswerResponse:
        """Generate, stream and store the bot's reply for a session.

        Args:
            session_id: Session whose last message to answer
            db: Database session

        Returns:
            ID and final text of the bot message

        Raises:
            ResourceNotFoundError: If the session has no messages
            ExternalServiceError: If a MiniMax call fails; the fallback text is stored first
        """
        token = set_correlation_id(session_id)
        try:
            context = await self.retrieval.retrieve(session_id, db)
            message_id = await self.message_service.add_bot_message(session_id, db)

            async def persist(text: str) -> None:
                await self.message_service.update_bot_message(message_id, text, db)

            try:
                payload = self.chat_client.build_request(context.documents, context.messages)
                text = await self.chat_client.stream_reply(payload, persist)

                if not text.strip():
                    logger.warning("Empty answer, replying with apology", extra={"message_id": message_id})
                    text = APOLOGY_MESSAGE

                await persist(text)
            except Exception:
                await db.rollback()
                await persist(FALLBACK_MESSAGE)
                raise

            logger.info("Answer stored", extra={"message_id": message_id, "characters": len(text)})
            return AnswerResponse(message_id=message_id, text=text)
        finally:
            reset_correlation_id(token)

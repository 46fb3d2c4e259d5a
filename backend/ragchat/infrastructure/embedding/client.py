"""Client for the MiniMax text embedding API."""

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ...modules.common.exceptions import ExternalApiError, HttpError, NetworkError
from ..config.minimax import MiniMaxConfig
from ..logging import get_logger

logger = get_logger(__name__)


class EmbeddingClient:
    """Turns texts into vectors through the MiniMax embeddings endpoint.

    One call embeds a whole batch; the returned vectors are index-aligned
    with the input texts. There is no retry: a failed call fails the caller.

    Request::

        POST {base_url}/embeddings?GroupId=<group id>
        {"texts": [...], "model": "embo-01", "type": "db"}

    Response::

        {"vectors": [[...], ...], "total_tokens": 42,
         "base_resp": {"status_code": 0, "status_msg": "success"}}

    A non-zero ``base_resp.status_code`` is an error even though the HTTP
    status is 200.
    """

    def __init__(self, config: MiniMaxConfig, http_client: Optional[httpx.AsyncClient] = None):
        """Initialize the embedding client.

        Args:
            config: MiniMax credentials and model names
            http_client: Shared HTTP client; a short-lived one is opened per call if omitted
        """
        self.config = config
        self._http_client = http_client

    @property
    def url(self) -> str:
        return f"{self.config.base_url}/embeddings"

    async def embed_texts(self, texts: List[str], embedding_type: str = "db") -> List[List[float]]:
        """Embed a batch of texts.

        Args:
            texts: Texts to embed
            embedding_type: MiniMax embedding type, "db" for stored content or "query"

        Returns:
            One vector per text, in input order

        Raises:
            HttpError: If the API answers with a non-success status
            ExternalApiError: If the API reports an error in its status envelope
            NetworkError: If the API can't be reached or the connection fails
        """
        if not texts:
            return []

        body = {"texts": texts, "model": self.config.embedding_model, "type": embedding_type}

        try:
            async with self._client() as client:
                response = await client.post(
                    self.url,
                    params={"GroupId": self.config.group_id},
                    headers=self.config.headers,
                    json=body,
                )
        except httpx.TransportError as e:
            logger.error("Embedding request could not be completed", extra={"error": type(e).__name__})
            raise NetworkError(f"Embedding request failed: {e!r}") from e

        if not response.is_success:
            logger.error("Embedding request failed", extra={"status_code": response.status_code})
            raise HttpError(response.status_code)

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as e:
            raise ExternalApiError(-1, f"Response body is not valid JSON: {e}") from e

        base_resp = data.get("base_resp")
        if base_resp and base_resp.get("status_code", 0) != 0:
            raise ExternalApiError(base_resp["status_code"], base_resp.get("status_msg", ""))

        vectors = data.get("vectors") or []
        if len(vectors) != len(texts):
            raise ExternalApiError(-1, f"Expected {len(texts)} vectors, got {len(vectors)}")

        logger.debug(
            "Embedded texts",
            extra={"text_count": len(texts), "total_tokens": data.get("total_tokens")},
        )
        return vectors

    async def embed_text(self, text: str, embedding_type: str = "db") -> List[float]:
        """Embed a single text as a one-element batch."""
        [vector] = await self.embed_texts([text], embedding_type=embedding_type)
        return vector

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return

        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            yield client


@lru_cache()
def get_embedding_client() -> EmbeddingClient:
    """Get the embedding client configured from application settings."""
    return EmbeddingClient(MiniMaxConfig.from_settings())

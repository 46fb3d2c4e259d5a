"""Streaming client for the MiniMax chat completion API."""

import json
from contextlib import asynccontextmanager
from enum import Enum
from functools import lru_cache
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence

import httpx

from ...modules.common.exceptions import EmptyResponseError, HttpError, JsonParseError, NetworkError
from ...modules.message.schemas import MessageRead
from ..config.minimax import MiniMaxConfig
from ..logging import get_logger
from . import prompts
from .streaming import DataLineDecoder, EventStreamDecoder, StreamEvent

logger = get_logger(__name__)

TextCallback = Callable[[str], Awaitable[None]]


class StreamState(str, Enum):
    """Lifecycle of one streamed reply."""

    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


class _Reply:
    """Accumulates the answer carried by the events of one stream."""

    def __init__(self, on_text: TextCallback):
        self.on_text = on_text
        self.text = ""
        self.event_count = 0

    async def handle(self, events: List[StreamEvent]) -> bool:
        """Apply decoded events in order; returns True once the end marker is seen."""
        for event in events:
            self.event_count += 1
            if event.terminal:
                logger.debug("Received [DONE] signal")
                return True

            try:
                delta = ChatClient.extract_delta(event.data)
            except JsonParseError as e:
                logger.warning(str(e), extra={"payload": e.payload})
                continue

            if delta:
                self.text += delta
                await self.on_text(self.text)

        return False


class ChatClient:
    """Builds chat completion requests and consumes their reply stream.

    The reply arrives as ``data: {...}`` lines terminated by ``data: [DONE]``.
    Each event carries the next piece of the answer at
    ``choices[0].messages[0].text``; the client accumulates the pieces and
    reports the growing answer through a callback after every piece, so the
    caller can persist partial text while the stream is still open.
    """

    def __init__(
        self,
        config: MiniMaxConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        decoder_factory: Callable[[], EventStreamDecoder] = DataLineDecoder,
    ):
        """Initialize the chat client.

        Args:
            config: MiniMax credentials and generation parameters
            http_client: Shared HTTP client; a short-lived one is opened per call if omitted
            decoder_factory: Builds a fresh event decoder for every reply
        """
        self.config = config
        self._http_client = http_client
        self._decoder_factory = decoder_factory

    @property
    def url(self) -> str:
        return f"{self.config.base_url}/text/chatcompletion_pro"

    def build_request(self, documents: Sequence[str], history: Sequence[MessageRead]) -> Dict[str, Any]:
        """Build the request body for one chat turn.

        The conversation sent is the fixed instruction, one turn per
        retrieved document, then the whole session history.

        Args:
            documents: Retrieved chunk texts, most relevant first
            history: Session messages in insertion order

        Returns:
            JSON-serialisable request body with streaming enabled
        """
        messages: List[Dict[str, str]] = [self._system_turn(prompts.SYSTEM_INSTRUCTION)]
        messages.extend(self._system_turn(prompts.RELEVANT_DOCUMENT_TEMPLATE.format(text=text)) for text in documents)
        messages.extend(
            {
                "sender_type": prompts.USER_SENDER_TYPE if message.is_viewer else prompts.BOT_SENDER_TYPE,
                "sender_name": prompts.USER_SENDER_NAME if message.is_viewer else prompts.BOT_NAME,
                "text": message.text,
            }
            for message in history
        )

        return {
            "model": self.config.chat_model,
            "tokens_to_generate": self.config.tokens_to_generate,
            "reply_constraints": {"sender_type": prompts.BOT_SENDER_TYPE, "sender_name": prompts.BOT_NAME},
            "messages": messages,
            "bot_setting": [{"bot_name": prompts.BOT_NAME, "content": prompts.BOT_PROFILE}],
            "stream": True,
            "temperature": self.config.temperature,
            "top_p": self.config.top_p,
        }

    async def stream_reply(self, payload: Dict[str, Any], on_text: TextCallback) -> str:
        """Send a request and consume its reply stream.

        ``on_text`` is awaited with the full accumulated answer after every
        non-empty piece. Malformed events are logged and skipped.

        Args:
            payload: Request body, usually from :meth:`build_request`
            on_text: Callback receiving the answer accumulated so far

        Returns:
            The accumulated answer (possibly empty or whitespace)

        Raises:
            HttpError: If the API answers with a non-success status; the body is not read
            NetworkError: If the API can't be reached or the connection breaks mid-stream
            EmptyResponseError: If the stream ends without any ``data:`` event
        """
        state = StreamState.IDLE
        decoder = self._decoder_factory()
        reply = _Reply(on_text)

        logger.info("Sending request to MiniMax API", extra={"turns": len(payload.get("messages", []))})
        logger.debug("Request body", extra={"body": json.dumps(payload, ensure_ascii=False)})

        try:
            state = StreamState.REQUESTING
            try:
                async with self._client() as client:
                    async with client.stream(
                        "POST",
                        self.url,
                        params={"GroupId": self.config.group_id},
                        headers=self.config.headers,
                        json=payload,
                    ) as response:
                        logger.info("Response received", extra={"status_code": response.status_code})

                        if not response.is_success:
                            raise HttpError(response.status_code)

                        state = StreamState.STREAMING
                        async for chunk in response.aiter_bytes():
                            logger.debug("Received chunk", extra={"size": len(chunk)})

                            if await reply.handle(decoder.feed(chunk)):
                                state = StreamState.DONE
                                break
            except httpx.TransportError as e:
                raise NetworkError(f"Reply stream failed: {e!r}") from e

            if state is not StreamState.DONE:
                await reply.handle(decoder.flush())
            state = StreamState.DONE

            if reply.event_count == 0:
                raise EmptyResponseError("No response received from the API")

        except Exception:
            logger.error(
                "Reply stream failed",
                extra={"state": StreamState.FAILED.value, "failed_in": state.value, "events": reply.event_count},
                exc_info=True,
            )
            raise

        logger.info("Reply stream finished", extra={"events": reply.event_count, "characters": len(reply.text)})
        return reply.text

    @staticmethod
    def extract_delta(data: str) -> Optional[str]:
        """Extract the answer piece carried by one event payload.

        Events without a text piece, or with a non-string one, carry no delta.

        Raises:
            JsonParseError: If the payload is not valid JSON
        """
        try:
            event = json.loads(data)
        except json.JSONDecodeError as e:
            raise JsonParseError(data, str(e)) from e

        try:
            delta = event["choices"][0]["messages"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None

        return delta if isinstance(delta, str) else None

    def _system_turn(self, text: str) -> Dict[str, str]:
        return {"sender_type": prompts.USER_SENDER_TYPE, "sender_name": prompts.SYSTEM_SENDER_NAME, "text": text}

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return

        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            yield client


@lru_cache()
def get_chat_client() -> ChatClient:
    """Get the chat client configured from application settings."""
    return ChatClient(MiniMaxConfig.from_settings())

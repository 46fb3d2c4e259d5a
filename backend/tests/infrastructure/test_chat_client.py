"""Tests for the streaming chat client."""

from datetime import datetime, timezone

import httpx
import pytest

from ragchat.infrastructure.chat import ChatClient, StreamState
from ragchat.infrastructure.chat import prompts
from ragchat.infrastructure.chat.streaming import DataLineDecoder, EventStreamDecoder
from ragchat.modules.common.exceptions import EmptyResponseError, ExternalServiceError, HttpError, NetworkError
from ragchat.modules.message.schemas import MessageRead
from tests.support import BrokenStream, ChunkedStream, RecordingTransport, refuse_connection, sse_body, sse_response


def message(message_id: int, is_viewer: bool, text: str) -> MessageRead:
    return MessageRead(
        id=message_id,
        session_id="session-1",
        is_viewer=is_viewer,
        text=text,
        created_at=datetime.now(timezone.utc),
    )


class TextRecorder:
    """Collects every value passed to the on_text callback."""

    def __init__(self):
        self.values = []

    async def __call__(self, text: str) -> None:
        self.values.append(text)


class BufferUntilFlush(EventStreamDecoder):
    """Decoder that releases nothing before the end of input."""

    def __init__(self):
        self._inner = DataLineDecoder()
        self._events = []

    def feed(self, chunk: bytes):
        self._events.extend(self._inner.feed(chunk))
        return []

    def flush(self):
        events, self._events = self._events + self._inner.flush(), []
        return events


class TestBuildRequest:
    """Tests for the request payload."""

    def test_payload_order(self, minimax_config):
        """Test system turn, then one turn per document, then the history."""
        client = ChatClient(minimax_config)
        history = [message(1, True, "Hi"), message(2, False, "Hello!"), message(3, True, "What is X?")]

        payload = client.build_request(["X is a letter.", "X marks the spot."], history)
        turns = payload["messages"]

        assert len(turns) == 1 + 2 + 3
        assert turns[0]["text"] == prompts.SYSTEM_INSTRUCTION
        assert turns[1]["text"] == "Relevant document:\n\nX is a letter."
        assert turns[2]["text"] == "Relevant document:\n\nX marks the spot."
        assert [turn["sender_type"] for turn in turns[3:]] == ["USER", "BOT", "USER"]
        assert [turn["sender_name"] for turn in turns[3:]] == [
            prompts.USER_SENDER_NAME,
            prompts.BOT_NAME,
            prompts.USER_SENDER_NAME,
        ]
        assert [turn["text"] for turn in turns[3:]] == ["Hi", "Hello!", "What is X?"]

    def test_payload_settings(self, minimax_config):
        """Test the generation parameters and bot declaration."""
        payload = ChatClient(minimax_config).build_request([], [message(1, True, "Hi")])

        assert payload["stream"] is True
        assert payload["model"] == minimax_config.chat_model
        assert payload["tokens_to_generate"] == minimax_config.tokens_to_generate
        assert payload["temperature"] == minimax_config.temperature
        assert payload["top_p"] == minimax_config.top_p
        assert payload["reply_constraints"] == {"sender_type": "BOT", "sender_name": prompts.BOT_NAME}
        assert payload["bot_setting"][0]["bot_name"] == prompts.BOT_NAME
        assert len(payload["messages"]) == 2


class TestStreamReply:
    """Tests for consuming the reply stream."""

    @pytest.mark.asyncio
    async def test_accumulates_deltas(self, minimax_config):
        """Test that every delta is appended and reported."""
        transport = RecordingTransport(lambda request: sse_response(sse_body("Hel", "lo", " there")))
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            text = await client.stream_reply({"messages": []}, on_text)

        assert text == "Hello there"
        assert on_text.values == ["Hel", "Hello", "Hello there"]
        request = transport.requests[0]
        assert request.url.path == "/v1/text/chatcompletion_pro"
        assert request.url.params["GroupId"] == "test-group"

    @pytest.mark.asyncio
    async def test_read_boundaries_do_not_matter(self, minimax_config):
        """Test that a body delivered byte by byte gives the same answer."""
        body = sse_body("你好", "，世界")
        transport = RecordingTransport(lambda request: sse_response(body, chunk_size=1))
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            text = await client.stream_reply({"messages": []}, on_text)

        assert text == "你好，世界"
        assert on_text.values == ["你好", "你好，世界"]

    @pytest.mark.asyncio
    async def test_malformed_line_is_skipped(self, minimax_config):
        """Test that one invalid JSON event doesn't abort the stream."""
        body = b'data: {"choices": [{"messages": [{"text": "A"}]}]}\n' + b"data: {not json\n" + sse_body("B")
        transport = RecordingTransport(lambda request: sse_response(body))
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            text = await client.stream_reply({"messages": []}, on_text)

        assert text == "AB"
        assert on_text.values == ["A", "AB"]

    @pytest.mark.asyncio
    async def test_events_without_text_are_ignored(self, minimax_config):
        """Test that events missing the text path or with empty text don't trigger persistence."""
        body = b'data: {"choices": []}\n' + sse_body("", "A", None)
        transport = RecordingTransport(lambda request: sse_response(body))
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            text = await client.stream_reply({"messages": []}, on_text)

        assert text == "A"
        assert on_text.values == ["A"]

    @pytest.mark.asyncio
    async def test_done_stops_processing(self, minimax_config):
        """Test that nothing after [DONE] is used."""
        body = sse_body("A") + sse_body("ignored", done=False)
        transport = RecordingTransport(lambda request: sse_response(body))
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            text = await client.stream_reply({"messages": []}, on_text)

        assert text == "A"
        assert on_text.values == ["A"]

    @pytest.mark.asyncio
    async def test_end_of_stream_without_done(self, minimax_config):
        """Test that the stream may end without the [DONE] sentinel."""
        transport = RecordingTransport(lambda request: sse_response(sse_body("A", "B", done=False)))

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            text = await client.stream_reply({"messages": []}, TextRecorder())

        assert text == "AB"

    @pytest.mark.asyncio
    async def test_non_success_status_does_not_read_body(self, minimax_config):
        """Test that an error status fails before the body is read."""
        stream = ChunkedStream([sse_body("never read")])
        transport = RecordingTransport(lambda request: httpx.Response(503, stream=stream))
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            with pytest.raises(HttpError) as exc_info:
                await client.stream_reply({"messages": []}, on_text)

        assert exc_info.value.status_code == 503
        assert str(exc_info.value) == "HTTP error! status: 503"
        assert stream.consumed is False
        assert on_text.values == []

    @pytest.mark.asyncio
    async def test_empty_stream(self, minimax_config):
        """Test that a stream without data lines is an error."""
        transport = RecordingTransport(lambda request: sse_response(b": nothing here\n\n"))

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            with pytest.raises(EmptyResponseError, match="No response received from the API"):
                await client.stream_reply({"messages": []}, TextRecorder())

    @pytest.mark.asyncio
    async def test_whitespace_answer_is_returned_as_is(self, minimax_config):
        """Test that the client leaves whitespace answers to the caller."""
        transport = RecordingTransport(lambda request: sse_response(sse_body("  ", "\n")))

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            text = await client.stream_reply({"messages": []}, TextRecorder())

        assert text == "  \n"

    @pytest.mark.asyncio
    async def test_connection_failure(self, minimax_config):
        """Test that an unreachable API surfaces as a network error."""
        transport = RecordingTransport(refuse_connection)
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            with pytest.raises(NetworkError) as exc_info:
                await client.stream_reply({"messages": []}, on_text)

        assert isinstance(exc_info.value, ExternalServiceError)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert on_text.values == []

    @pytest.mark.asyncio
    async def test_connection_drop_mid_stream(self, minimax_config):
        """Test that a connection lost after some deltas fails the reply."""
        stream = BrokenStream([sse_body("A", done=False)])
        transport = RecordingTransport(lambda request: httpx.Response(200, stream=stream))
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            with pytest.raises(NetworkError):
                await client.stream_reply({"messages": []}, on_text)

        assert on_text.values == ["A"]

    @pytest.mark.asyncio
    async def test_non_string_text_is_ignored(self, minimax_config):
        """Test that an event with a non-string text doesn't abort the stream."""
        body = b'data: {"choices": [{"messages": [{"text": 5}]}]}\n' + sse_body("A")
        transport = RecordingTransport(lambda request: sse_response(body))
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client)
            text = await client.stream_reply({"messages": []}, on_text)

        assert text == "A"
        assert on_text.values == ["A"]

    @pytest.mark.asyncio
    async def test_events_released_at_flush_are_used(self, minimax_config):
        """Test that a decoder holding events until end of input still contributes them."""
        transport = RecordingTransport(lambda request: sse_response(sse_body("A", "B", done=False)))
        on_text = TextRecorder()

        async with transport.client() as http_client:
            client = ChatClient(minimax_config, http_client=http_client, decoder_factory=BufferUntilFlush)
            text = await client.stream_reply({"messages": []}, on_text)

        assert text == "AB"
        assert on_text.values == ["A", "AB"]


def test_extract_delta():
    """Test reading the answer piece from an event payload."""
    assert ChatClient.extract_delta('{"choices": [{"messages": [{"text": "hi"}]}]}') == "hi"
    assert ChatClient.extract_delta('{"choices": [{"messages": []}]}') is None
    assert ChatClient.extract_delta('{"base_resp": {"status_code": 0}}') is None
    assert ChatClient.extract_delta('{"choices": [{"messages": [{"text": 5}]}]}') is None


def test_stream_states():
    """Test the lifecycle states."""
    assert [state.value for state in StreamState] == ["idle", "requesting", "streaming", "done", "failed"]

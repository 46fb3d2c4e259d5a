"""Fakes for the MiniMax HTTP APIs."""

import json
from typing import Any, AsyncIterator, Callable, Dict, Iterable, List, Optional

import httpx


class RecordingTransport:
    """Handler for ``httpx.MockTransport`` that records every request."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def json_bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered in exactly the given pieces."""

    def __init__(self, chunks: Iterable[bytes]):
        self.chunks = list(chunks)
        self.consumed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        self.consumed = True
        for chunk in self.chunks:
            yield chunk


class BrokenStream(httpx.AsyncByteStream):
    """Response body whose connection drops after the given pieces."""

    def __init__(self, chunks: Iterable[bytes]):
        self.chunks = list(chunks)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk
        raise httpx.ReadError("connection reset by peer")


def refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def embedding_response(vectors: List[List[float]], status_code: int = 0, status_msg: str = "success") -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "vectors": vectors,
            "total_tokens": 7,
            "base_resp": {"status_code": status_code, "status_msg": status_msg},
        },
    )


def embed_by_count(dimension: int = 4) -> Callable[[httpx.Request], httpx.Response]:
    """Responder returning one distinct vector per requested text."""
    counter = {"next": 0}

    def respond(request: httpx.Request) -> httpx.Response:
        texts = json.loads(request.content)["texts"]
        vectors = []
        for _ in texts:
            counter["next"] += 1
            vectors.append(fixed_vector(float(counter["next"]), dimension))
        return embedding_response(vectors)

    return respond


def sse_body(*texts: Optional[str], done: bool = True) -> bytes:
    """Build a reply stream with one event per text."""
    lines = []
    for text in texts:
        event = {"choices": [{"messages": [{"sender_type": "BOT", "text": text}]}]}
        lines.append(f"data: {json.dumps(event, ensure_ascii=False)}\n")
    if done:
        lines.append("data: [DONE]\n")
    return "".join(lines).encode("utf-8")


def sse_response(body: bytes, chunk_size: Optional[int] = None) -> httpx.Response:
    """Stream ``body`` back, split into pieces of ``chunk_size`` bytes."""
    if chunk_size is None:
        chunks = [body]
    else:
        chunks = [body[i : i + chunk_size] for i in range(0, len(body), chunk_size)]
    return httpx.Response(200, headers={"Content-Type": "text/event-stream"}, stream=ChunkedStream(chunks))


def fixed_vector(seed: float, dimension: int = 4) -> List[float]:
    return [seed + i for i in range(dimension)]

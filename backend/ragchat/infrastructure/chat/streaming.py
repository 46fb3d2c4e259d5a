"""Incremental decoding of server-sent-event style response bodies.

The chat client only deals with :class:`StreamEvent` objects; how raw bytes
are buffered and split into events is the decoder's business, so a provider
with a different framing only needs a new :class:`EventStreamDecoder`.
"""

import codecs
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class StreamEvent:
    """One event of a reply stream.

    Attributes:
        data: Payload with the framing removed
        terminal: True for the end-of-stream marker; such events carry no content
    """

    data: str
    terminal: bool = False


class EventStreamDecoder(ABC):
    """Bytes in, discrete events out.

    Implementations must be insensitive to how the body is split across
    reads: feeding the same bytes in any number of pieces yields the same
    events in the same order.
    """

    @abstractmethod
    def feed(self, chunk: bytes) -> List[StreamEvent]:
        """Consume the next piece of the body and return the completed events."""
        pass

    @abstractmethod
    def flush(self) -> List[StreamEvent]:
        """Signal end of input and return any events still pending."""
        pass


class DataLineDecoder(EventStreamDecoder):
    """Decoder for newline-delimited ``data: <payload>`` streams.

    Only complete lines are interpreted; the trailing fragment after the
    last newline stays buffered until the next :meth:`feed`. Lines without
    the ``data: `` prefix are ignored and ``data: [DONE]`` becomes a terminal
    event. A fragment still unterminated at end of input is dropped.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received after the last newline."""
        return self._buffer

    def feed(self, chunk: bytes) -> List[StreamEvent]:
        self._buffer += self._decoder.decode(chunk)

        *lines, self._buffer = self._buffer.split("\n")

        events = []
        for line in lines:
            event = self._parse_line(line.rstrip("\r"))
            if event is not None:
                events.append(event)
        return events

    def flush(self) -> List[StreamEvent]:
        self._buffer += self._decoder.decode(b"", final=True)
        self._buffer = ""
        return []

    def _parse_line(self, line: str) -> StreamEvent | None:
        if not line.startswith(DATA_PREFIX):
            return None

        payload = line[len(DATA_PREFIX) :]
        if payload == DONE_SENTINEL:
            return StreamEvent(data=payload, terminal=True)
        return StreamEvent(data=payload)

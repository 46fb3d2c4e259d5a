"""MiniMax chat completion streaming."""

from .client import ChatClient, StreamState, get_chat_client
from .streaming import DataLineDecoder, EventStreamDecoder, StreamEvent

__all__ = [
    "ChatClient",
    "DataLineDecoder",
    "EventStreamDecoder",
    "StreamEvent",
    "StreamState",
    "get_chat_client",
]

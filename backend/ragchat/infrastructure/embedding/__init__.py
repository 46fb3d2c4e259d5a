"""MiniMax embedding API client."""

from .client import EmbeddingClient, get_embedding_client

__all__ = ["EmbeddingClient", "get_embedding_client"]

"""Pydantic schemas for embeddings and the embedding pipeline."""

from typing import Optional

from pydantic import BaseModel, Field


class EmbedAllResult(BaseModel):
    """Outcome of one run of the embedding pipeline."""

    pages: int = Field(description="Number of document pages walked")
    documents: int = Field(description="Number of documents visited")
    chunks_embedded: int = Field(description="Number of chunks that received an embedding")


class EmbeddingStatus(BaseModel):
    """How far the corpus is from being fully embedded."""

    chunks_needing_embedding: int = Field(description="Chunks without an embedding")
    embeddings: int = Field(description="Stored embeddings")
    indexed_vectors: Optional[int] = Field(default=None, description="Vectors in the search index, None if not loaded")

"""Pydantic schemas for document entities."""

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import TimestampSchema


class DocumentBase(BaseModel):
    """Base schema for document data."""

    text: Annotated[str, Field(min_length=1, description="Full document text")]
    url: Optional[Annotated[str, Field(max_length=2048, description="Where the document came from")]] = None


class DocumentCreate(DocumentBase):
    """Schema for storing a document together with its pre-split chunks."""

    chunks: List[Annotated[str, Field(min_length=1)]] = Field(
        default_factory=list, description="Chunk texts, stored without embeddings"
    )


class DocumentRead(TimestampSchema, DocumentBase):
    """Schema for reading document data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    chunk_count: int = Field(default=0, description="Number of chunks in document")


class DocumentPage(BaseModel):
    """One page of a cursor-based walk over all documents."""

    page: List[DocumentRead]
    continue_cursor: Optional[int] = Field(default=None, description="Cursor to pass to fetch the next page")
    is_done: bool = Field(description="True when no documents remain after this page")

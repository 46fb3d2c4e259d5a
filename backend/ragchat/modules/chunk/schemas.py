"""Pydantic schemas for chunk entities."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import TimestampSchema


class ChunkRead(TimestampSchema):
    """Schema for reading chunk data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    document_id: int
    text: str
    embedding_id: Optional[int] = Field(default=None, description="Embedding linked to this chunk, if embedded yet")

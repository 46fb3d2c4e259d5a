"""Pydantic schemas for chat messages."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import TimestampSchema


class MessageCreate(BaseModel):
    """Schema for a message written by the user."""

    text: Annotated[str, Field(min_length=1, max_length=10000, description="Message text")]


class MessageRead(TimestampSchema):
    """Schema for reading message data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: str
    is_viewer: bool = Field(description="True for user messages, False for bot replies")
    text: str

"""Pydantic schemas for retrieval and answers."""

from typing import List

from pydantic import BaseModel, Field

from ..message.schemas import MessageRead


class RetrievalResult(BaseModel):
    """Context gathered for one answer."""

    messages: List[MessageRead] = Field(description="Session history in insertion order")
    documents: List[str] = Field(description="Retrieved chunk texts, most relevant first")


class AnswerResponse(BaseModel):
    """The bot message an answer call wrote."""

    message_id: int
    text: str

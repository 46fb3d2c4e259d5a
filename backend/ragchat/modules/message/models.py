"""SQLAlchemy models for chat messages."""

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class Message(Base, TimestampMixin):
    """One turn of a chat session.

    ``is_viewer`` is true for messages written by the user and false for bot
    replies. Bot replies are created empty and rewritten while the answer
    streams in; user messages are never modified.
    """

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    session_id: Mapped[str] = mapped_column(String(255), index=True)
    is_viewer: Mapped[bool] = mapped_column(Boolean)
    text: Mapped[str] = mapped_column(Text, default="")

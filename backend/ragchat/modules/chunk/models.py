"""SQLAlchemy models for chunk entities."""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class Chunk(Base, TimestampMixin):
    """A piece of a document's text.

    ``embedding_id`` is null until the embedding pipeline has embedded the
    chunk; once set it never changes. It is indexed so a similarity search
    hit (an embedding id) can be resolved back to its chunk.
    """

    __tablename__ = "chunks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    document_id: Mapped[int] = mapped_column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), index=True)
    text: Mapped[str] = mapped_column(Text)
    embedding_id: Mapped[Optional[int]] = mapped_column(Integer, index=True, default=None)

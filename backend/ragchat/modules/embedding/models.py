"""SQLAlchemy models for embedding entities."""

from typing import List

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin, VectorType
from ...infrastructure.database.session import Base


class Embedding(Base, TimestampMixin):
    """The vector of one chunk.

    Embeddings are immutable once written. The owning chunk points back to
    its embedding through ``chunks.embedding_id``, which is what a search
    hit is resolved with.
    """

    __tablename__ = "embeddings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    chunk_id: Mapped[int] = mapped_column(Integer, ForeignKey("chunks.id", ondelete="CASCADE"), index=True)
    embedding: Mapped[List[float]] = mapped_column(VectorType)

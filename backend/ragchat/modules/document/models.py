"""SQLAlchemy models for document entities."""

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class Document(Base, TimestampMixin):
    """Source document whose text has been split into chunks.

    The document text itself is opaque to the service; retrieval works on
    the chunks that reference it.
    """

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    text: Mapped[str] = mapped_column(Text)
    url: Mapped[Optional[str]] = mapped_column(String(2048), default=None)

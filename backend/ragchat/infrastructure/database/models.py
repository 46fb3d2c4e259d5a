from datetime import UTC, datetime
from typing import List

from sqlalchemy import ARRAY, JSON, DateTime, Float
from sqlalchemy.orm import Mapped, MappedAsDataclass, mapped_column
from sqlalchemy.types import TypeEngine

# Float arrays on PostgreSQL, JSON lists on SQLite (used by the test-suite).
VectorType: TypeEngine[List[float]] = ARRAY(Float).with_variant(JSON(), "sqlite")


class TimestampMixin(MappedAsDataclass):
    """Mixin for adding created_at and updated_at timestamp columns.

    Both timestamps are timezone-aware and stored in UTC. They are excluded
    from dataclass initialization so models can't be created with forged
    timestamps; fastcrud refreshes ``updated_at`` on every update.

    Example:
        ```python
        class Message(Base, TimestampMixin):
            __tablename__ = "messages"

            text: Mapped[str] = mapped_column(Text)

        message = Message(text="hello")
        # message.created_at and message.updated_at are set automatically
        ```
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        init=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default_factory=lambda: datetime.now(UTC),
        nullable=True,
        init=False,
    )

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config.settings import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
)

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Base class for all database models.

    Combines SQLAlchemy's DeclarativeBase with MappedAsDataclass so every
    model gets a generated ``__init__``/``__repr__``/``__eq__`` from its
    mapped columns. The four tables of the service (documents, chunks,
    embeddings, messages) all inherit from it.
    """

    pass


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database session management with proper lifecycle.

    Designed to be used as a FastAPI dependency via ``Depends(async_session)``;
    tests override it with a session bound to their own engine.

    Yields:
        AsyncSession: A configured async database session.
    """
    async with local_session() as db:
        yield db


async def create_tables() -> None:
    """Create all tables in the database if they don't exist.

    Idempotent: existing tables are left unchanged.
    """
    # Import models so they register on Base.metadata.
    from ...modules.chunk import models as _chunk_models  # noqa: F401
    from ...modules.document import models as _document_models  # noqa: F401
    from ...modules.embedding import models as _embedding_models  # noqa: F401
    from ...modules.message import models as _message_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

"""Test configuration and fixtures for the RAG chat backend."""

import os

# Settings are read at import time, so the environment comes first.
os.environ.setdefault("ENVIRONMENT", "local")
os.environ.setdefault("MINIMAX_GROUP_ID", "test-group")
os.environ.setdefault("MINIMAX_API_KEY", "test-key")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ragchat.infrastructure.config import MiniMaxConfig  # noqa: E402
from ragchat.infrastructure.database.session import Base, async_session  # noqa: E402
from ragchat.infrastructure.indexing import index_manager  # noqa: E402
from ragchat.infrastructure.logging import configure_testing_logging  # noqa: E402
from ragchat.interfaces.main import app  # noqa: E402
from ragchat.modules.chunk.models import Chunk  # noqa: E402
from ragchat.modules.document.models import Document  # noqa: E402
from ragchat.modules.embedding.models import Embedding  # noqa: E402, F401
from ragchat.modules.message.models import Message  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def quiet_logging():
    configure_testing_logging()


@pytest_asyncio.fixture(autouse=True)
async def reset_index():
    """Drop the process-wide embedding index between tests."""
    await index_manager.reset()
    yield
    await index_manager.reset()


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """Create an in-memory SQLite engine with the schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_db_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(test_db_engine):
    """Create a test client where every request gets its own session."""
    app.dependency_overrides = {}

    test_session_factory = async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[async_session] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def minimax_config() -> MiniMaxConfig:
    return MiniMaxConfig(group_id="test-group", api_key="test-key", base_url="https://minimax.test/v1")


@pytest_asyncio.fixture
async def test_document(db_session: AsyncSession):
    """Create a document with two unembedded chunks."""
    document = Document(text="Cats are small carnivorous mammals. They sleep a lot.", url="https://example.com/cats")
    db_session.add(document)
    await db_session.flush()

    chunks = [
        Chunk(document_id=document.id, text="Cats are small carnivorous mammals."),
        Chunk(document_id=document.id, text="They sleep a lot."),
    ]
    db_session.add_all(chunks)
    await db_session.commit()

    return {
        "id": document.id,
        "text": document.text,
        "url": document.url,
        "chunk_ids": [chunk.id for chunk in chunks],
    }


@pytest_asyncio.fixture
async def test_session(db_session: AsyncSession):
    """Create a session holding one exchange and a pending question."""
    session_id = "session-1"
    db_session.add_all(
        [
            Message(session_id=session_id, is_viewer=True, text="Hi"),
            Message(session_id=session_id, is_viewer=False, text="Hello! How can I help?"),
            Message(session_id=session_id, is_viewer=True, text="What is X?"),
        ]
    )
    await db_session.commit()
    return session_id

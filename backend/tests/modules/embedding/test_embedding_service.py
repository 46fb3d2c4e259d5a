"""Tests for embedding storage."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ragchat.infrastructure.indexing import IndexManager
from ragchat.modules.chunk.models import Chunk
from ragchat.modules.common.exceptions import EmbeddingAlreadyLinkedError, ResourceNotFoundError, ValidationError
from ragchat.modules.embedding.models import Embedding
from ragchat.modules.embedding.services import EmbeddingService


@pytest.fixture
def indexes():
    return IndexManager()


@pytest.fixture
def embedding_service(indexes: IndexManager):
    """Create embedding service instance with its own index."""
    return EmbeddingService(indexes=indexes)


async def count_embeddings(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Embedding.id)))).scalar_one()


@pytest.mark.asyncio
async def test_add_embedding_links_chunk(embedding_service: EmbeddingService, db_session: AsyncSession, test_document: dict):
    """Test that storing an embedding links its chunk."""
    chunk_id = test_document["chunk_ids"][0]

    embedding_id = await embedding_service.add_embedding(chunk_id, [0.1, 0.2, 0.3], db_session)

    chunk = await db_session.get(Chunk, chunk_id)
    embedding = await db_session.get(Embedding, embedding_id)
    assert chunk.embedding_id == embedding_id
    assert embedding.chunk_id == chunk_id
    assert embedding.embedding == pytest.approx([0.1, 0.2, 0.3])


@pytest.mark.asyncio
async def test_add_embedding_twice_is_rejected(
    embedding_service: EmbeddingService, db_session: AsyncSession, test_document: dict
):
    """Test that a second embedding for the same chunk isn't stored."""
    chunk_id = test_document["chunk_ids"][0]
    first_id = await embedding_service.add_embedding(chunk_id, [1.0, 0.0], db_session)

    with pytest.raises(EmbeddingAlreadyLinkedError):
        await embedding_service.add_embedding(chunk_id, [0.0, 1.0], db_session)

    chunk = await db_session.get(Chunk, chunk_id)
    assert chunk.embedding_id == first_id
    assert await count_embeddings(db_session) == 1


@pytest.mark.asyncio
async def test_add_embedding_unknown_chunk(embedding_service: EmbeddingService, db_session: AsyncSession):
    """Test that nothing is stored for a missing chunk."""
    with pytest.raises(ResourceNotFoundError):
        await embedding_service.add_embedding(99999, [1.0, 0.0], db_session)

    assert await count_embeddings(db_session) == 0


@pytest.mark.asyncio
async def test_add_embedding_updates_loaded_index(
    embedding_service: EmbeddingService, indexes: IndexManager, db_session: AsyncSession, test_document: dict
):
    """Test that a loaded index picks up new embeddings."""
    await indexes.search([1.0, 0.0], k=8, db=db_session)

    embedding_id = await embedding_service.add_embedding(test_document["chunk_ids"][1], [1.0, 0.0], db_session)

    results = await indexes.search([1.0, 0.0], k=8, db=db_session)
    assert [result.embedding_id for result in results] == [embedding_id]


@pytest.mark.asyncio
async def test_get_status(embedding_service: EmbeddingService, db_session: AsyncSession, test_document: dict):
    """Test the embedding status counts."""
    await embedding_service.add_embedding(test_document["chunk_ids"][0], [1.0, 0.0], db_session)

    status = await embedding_service.get_status(db_session)

    assert status.chunks_needing_embedding == 1
    assert status.embeddings == 1
    assert status.indexed_vectors is None


@pytest.mark.asyncio
async def test_add_embedding_wrong_dimension_for_loaded_index(
    embedding_service: EmbeddingService, indexes: IndexManager, db_session: AsyncSession, test_document: dict
):
    """Test that a vector of another dimension than the loaded index is neither stored nor linked."""
    await indexes.search([1.0, 0.0, 0.0], k=8, db=db_session)
    chunk_id = test_document["chunk_ids"][0]

    with pytest.raises(ValidationError, match="dimension"):
        await embedding_service.add_embedding(chunk_id, [1.0, 2.0], db_session)

    chunk = await db_session.get(Chunk, chunk_id)
    assert chunk.embedding_id is None
    assert await count_embeddings(db_session) == 0


@pytest.mark.asyncio
async def test_add_embedding_wrong_dimension_for_configured_index(db_session: AsyncSession, test_document: dict):
    """Test that the configured dimension is enforced before the index is loaded."""
    service = EmbeddingService(indexes=IndexManager(dimension=4))

    with pytest.raises(ValidationError):
        await service.add_embedding(test_document["chunk_ids"][0], [1.0, 0.0], db_session)

    assert await count_embeddings(db_session) == 0
    assert await service.add_embedding(test_document["chunk_ids"][0], [1.0, 0.0, 0.0, 0.0], db_session) > 0

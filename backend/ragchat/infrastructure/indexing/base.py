"""Abstract base classes for the embedding similarity index."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class EmbeddingVector:
    """A stored embedding together with the chunk it belongs to."""

    embedding_id: int
    chunk_id: int
    embedding: List[float]


@dataclass
class SearchResult:
    """A search hit with its similarity score."""

    embedding_id: int
    chunk_id: int
    similarity_score: float


@dataclass
class IndexStats:
    """Statistics about an index."""

    total_vectors: int
    embedding_dimension: int
    algorithm_params: Optional[dict] = None


class VectorIndex(ABC):
    """Interface of a nearest-neighbour index over embeddings.

    All vectors in one index share the dimension of the model that
    produced them; adding or querying with another dimension is an error.
    """

    def __init__(self, dimension: int):
        """Initialize the vector index.

        Args:
            dimension: The dimension of the vectors to be indexed
        """
        self.dimension = dimension
        self.vectors: List[EmbeddingVector] = []

    @abstractmethod
    async def add_vectors(self, vectors: List[EmbeddingVector]) -> None:
        """Add vectors to the index.

        Args:
            vectors: Vectors to add

        Raises:
            ValueError: If a vector has the wrong dimension
        """
        pass

    @abstractmethod
    async def search(self, query_embedding: List[float], k: int) -> List[SearchResult]:
        """Search for the k most similar vectors.

        Args:
            query_embedding: The query vector
            k: Number of nearest neighbours to return

        Returns:
            At most k results sorted by similarity (descending)
        """
        pass

    async def add_vector(self, vector: EmbeddingVector) -> None:
        """Add a single vector to the index."""
        await self.add_vectors([vector])

    async def clear(self) -> None:
        """Clear all vectors from the index."""
        self.vectors.clear()

    def get_stats(self) -> IndexStats:
        """Get statistics about the current index."""
        return IndexStats(total_vectors=len(self.vectors), embedding_dimension=self.dimension)

    def _validate_embedding(self, embedding: List[float]) -> None:
        """Check that an embedding has the index dimension.

        Raises:
            ValueError: If the embedding dimension is incorrect
        """
        if len(embedding) != self.dimension:
            raise ValueError(f"Embedding dimension {len(embedding)} does not match index dimension {self.dimension}")

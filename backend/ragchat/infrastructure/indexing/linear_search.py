"""Linear search vector index implementation."""

import math
from typing import List

from .base import EmbeddingVector, IndexStats, SearchResult, VectorIndex


class LinearSearchIndex(VectorIndex):
    """Brute-force cosine similarity over every stored embedding.

    Search is O(n * d) for n vectors of dimension d and always exact, which
    is fine for the corpus sizes this service handles. Ties keep insertion
    order.
    """

    async def add_vectors(self, vectors: List[EmbeddingVector]) -> None:
        for vector in vectors:
            self._validate_embedding(vector.embedding)

        self.vectors.extend(vectors)

    async def search(self, query_embedding: List[float], k: int) -> List[SearchResult]:
        self._validate_embedding(query_embedding)

        if k <= 0 or not self.vectors:
            return []

        scored = [(self._cosine_similarity(query_embedding, vector.embedding), vector) for vector in self.vectors]
        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            SearchResult(embedding_id=vector.embedding_id, chunk_id=vector.chunk_id, similarity_score=score)
            for score, vector in scored[:k]
        ]

    def _cosine_similarity(self, vec1: List[float], vec2: List[float]) -> float:
        """Calculate cosine similarity between two vectors.

        Formula: cos(θ) = (A · B) / (||A|| ||B||); zero vectors score 0.
        """
        dot_product = sum(a * b for a, b in zip(vec1, vec2))

        magnitude1 = math.sqrt(sum(a * a for a in vec1))
        magnitude2 = math.sqrt(sum(b * b for b in vec2))

        if magnitude1 == 0.0 or magnitude2 == 0.0:
            return 0.0

        return dot_product / (magnitude1 * magnitude2)

    def get_stats(self) -> IndexStats:
        return IndexStats(
            total_vectors=len(self.vectors),
            embedding_dimension=self.dimension,
            algorithm_params={"algorithm": "brute_force", "exact_search": True},
        )

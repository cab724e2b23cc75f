"""In-memory vector store with cosine similarity search."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import faiss
import numpy as np

from .exceptions import BatchLengthMismatchError, DimensionMismatchError
from .schemas import KnowledgeSource, ScoredSource, VectorEntry

DEFAULT_SEARCH_LIMIT = 5
DEFAULT_MIN_SCORE = 0.7


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors, 0.0 if either has zero magnitude."""
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    magnitude = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if magnitude == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / magnitude, -1.0, 1.0))


def _normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """L2-normalize each row, leaving zero rows at zero."""
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    safe = np.where(norms == 0.0, 1.0, norms)
    return (matrix / safe).astype("float32")


def _as_list(embedding: Sequence[float]) -> List[float]:
    if isinstance(embedding, list):
        return embedding
    return [float(value) for value in embedding]


class VectorStore:
    """
    Holds (id, embedding, source) entries and ranks them by cosine similarity.

    Vectors are stored L2-normalized in a flat inner-product index, so the
    inner product of a normalized query with a stored row is their cosine
    similarity. Search is an exact linear scan.

    Args:
        dimension: Fixed vector dimension, or None to take it from the
            first inserted vector
    """

    def __init__(self, dimension: Optional[int] = None):
        if dimension is not None and dimension <= 0:
            raise ValueError("dimension must be positive")
        self._configured_dimension = dimension
        self._dimension = dimension
        self._entries: List[VectorEntry] = []
        self._positions: Dict[str, int] = {}
        self._index: Optional[faiss.IndexFlatIP] = None
        # Overwritten rows not yet written back to the index
        self._pending: Dict[int, np.ndarray] = {}

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> List[VectorEntry]:
        return list(self._entries)

    def clear(self) -> None:
        """Remove every entry and return to the constructor's dimension."""
        self._entries = []
        self._positions = {}
        self._index = None
        self._pending = {}
        self._dimension = self._configured_dimension

    def add(self, source: KnowledgeSource, embedding: Sequence[float]) -> None:
        self.add_batch([source], [embedding])

    def add_batch(
        self,
        sources: Sequence[KnowledgeSource],
        embeddings: Sequence[Sequence[float]],
    ) -> None:
        """
        Add sources paired positionally with their embeddings.

        Raises:
            BatchLengthMismatchError: If the sequences differ in length
            DimensionMismatchError: If any embedding has the wrong dimension

        Nothing is inserted when an error is raised. An entry whose id is
        already stored is overwritten in place.
        """
        if len(sources) != len(embeddings):
            raise BatchLengthMismatchError(len(sources), len(embeddings))
        if not sources:
            return

        dimension = self._dimension if self._dimension is not None else len(embeddings[0])
        for embedding in embeddings:
            if len(embedding) != dimension:
                raise DimensionMismatchError(dimension, len(embedding))

        rows = _normalize_rows(np.asarray(embeddings, dtype=np.float64).reshape(len(embeddings), dimension))

        if self._index is None:
            self._index = faiss.IndexFlatIP(dimension)
        self._dimension = dimension

        existing = len(self._entries)
        new_rows: List[np.ndarray] = []
        for row, source, embedding in zip(rows, sources, embeddings):
            # The entry shares the caller's list; the index keeps the normalized row
            entry = VectorEntry.model_construct(id=source.id, embedding=_as_list(embedding), source=source)
            position = self._positions.get(source.id)
            if position is None:
                self._positions[source.id] = len(self._entries)
                self._entries.append(entry)
                new_rows.append(row)
                continue
            self._entries[position] = entry
            if position < existing:
                self._pending[position] = row
            else:
                new_rows[position - existing] = row

        if new_rows:
            self._index.add(np.vstack(new_rows).astype("float32"))

    def _ensure_index(self) -> faiss.IndexFlatIP:
        if self._pending:
            matrix = self._index.reconstruct_n(0, self._index.ntotal)
            for position, row in self._pending.items():
                matrix[position] = row
            self._index.reset()
            self._index.add(matrix)
            self._pending = {}
        return self._index

    def search_with_scores(
        self,
        query_embedding: Sequence[float],
        limit: int = DEFAULT_SEARCH_LIMIT,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> List[ScoredSource]:
        """
        Rank stored sources against a query vector.

        Returns at most limit results with score >= min_score, highest
        first. Equal scores keep insertion order.
        """
        if self._dimension is not None and len(query_embedding) != self._dimension:
            raise DimensionMismatchError(self._dimension, len(query_embedding))
        if not self._entries or limit <= 0:
            return []

        query = _normalize_rows(np.asarray(query_embedding, dtype=np.float64).reshape(1, -1))
        index = self._ensure_index()
        scores, positions = index.search(query, index.ntotal)

        ranked = [
            (int(position), float(np.clip(score, -1.0, 1.0)))
            for position, score in zip(positions[0], scores[0])
            if position >= 0
        ]
        ranked.sort(key=lambda item: (-item[1], item[0]))

        results: List[ScoredSource] = []
        for position, score in ranked:
            if score < min_score:
                break
            results.append(ScoredSource(source=self._entries[position].source, score=score))
            if len(results) >= limit:
                break
        return results

    def search(
        self,
        query_embedding: Sequence[float],
        limit: int = DEFAULT_SEARCH_LIMIT,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> List[KnowledgeSource]:
        return [
            scored.source
            for scored in self.search_with_scores(query_embedding, limit=limit, min_score=min_score)
        ]

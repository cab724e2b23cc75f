"""Embedding strategies with a deterministic fallback.

The provider tries the remote strategy first and, on any failure, serves the
whole call from the deterministic strategy.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import numpy as np
from langchain_core.embeddings import Embeddings
from tqdm import tqdm

from .config import RAGSettings
from .exceptions import EmbeddingError
from .utils import iter_batches

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS = 1536
DEFAULT_BATCH_SIZE = 100


class EmbeddingStrategy(ABC):
    """Turns text into fixed-length vectors."""

    name = "base"

    def __init__(self, dimension: int = DEFAULT_DIMENSIONS):
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self.dimension = dimension

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        ...

    @abstractmethod
    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        ...


class DeterministicEmbeddingStrategy(EmbeddingStrategy):
    """
    Character-code based embedding with no semantic meaning.

    The same text always yields the same unit-length vector.
    """

    name = "deterministic"

    def vectorize(self, text: str) -> List[float]:
        normalized = text.lower().strip()
        positions = np.arange(1, self.dimension + 1, dtype=np.float64)

        if normalized:
            codes = np.array([ord(char) for char in normalized], dtype=np.float64)
            char_codes = codes[(positions.astype(np.int64) - 1) % len(codes)]
        else:
            char_codes = np.zeros(self.dimension, dtype=np.float64)

        values = np.sin(char_codes * positions) * np.cos(len(normalized) * positions)
        magnitude = float(np.linalg.norm(values))
        if magnitude == 0.0:
            # Empty text has no signal; pin it to the first axis to keep unit norm
            values = np.zeros(self.dimension, dtype=np.float64)
            values[0] = 1.0
            return values.tolist()
        return (values / magnitude).tolist()

    async def embed(self, text: str) -> List[float]:
        return self.vectorize(text)

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        return [self.vectorize(text) for text in texts]


class RemoteEmbeddingStrategy(EmbeddingStrategy):
    """Embeds through a LangChain embeddings client (OpenAI, Ollama, ...)."""

    name = "remote"

    def __init__(
        self,
        client: Embeddings,
        dimension: int = DEFAULT_DIMENSIONS,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_retries: int = 2,
        retry_delay: float = 0.5,
        show_progress: bool = False,
    ):
        super().__init__(dimension)
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.client = client
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.show_progress = show_progress

    async def _with_retry(self, call, *args):
        """Await call(*args) with exponential backoff retry."""
        delay = self.retry_delay
        last_exc: Optional[BaseException] = None

        for attempt in range(self.max_retries + 1):
            try:
                return await call(*args)
            except Exception as exc:
                last_exc = exc
                if attempt >= self.max_retries:
                    break
                logger.warning(
                    "Embedding call failed (attempt %d/%d), retrying in %.1fs: %s",
                    attempt + 1, self.max_retries + 1, delay, exc,
                )
                await asyncio.sleep(delay)
                delay *= 2

        raise EmbeddingError(f"Embedding failed after retries: {last_exc}") from last_exc

    def _checked(self, vector: Sequence[float]) -> List[float]:
        if len(vector) != self.dimension:
            raise EmbeddingError(
                f"Embedding model returned {len(vector)} dimension(s), expected {self.dimension}"
            )
        return list(vector)

    async def embed(self, text: str) -> List[float]:
        return self._checked(await self._with_retry(self.client.aembed_query, text))

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        vectors: List[List[float]] = []
        with tqdm(total=len(texts), desc="Embedding sources", disable=not self.show_progress) as progress:
            for batch in iter_batches(texts, self.batch_size):
                batch_vectors = await self._with_retry(self.client.aembed_documents, batch)
                if len(batch_vectors) != len(batch):
                    raise EmbeddingError(
                        f"Embedding batch returned {len(batch_vectors)} vector(s) for {len(batch)} text(s)"
                    )
                vectors.extend(self._checked(vector) for vector in batch_vectors)
                progress.update(len(batch))
        return vectors


class EmbeddingProvider:
    """
    Embeds text with a primary strategy and falls back on failure.

    Args:
        primary: Remote strategy, or None to always use the fallback
        fallback: Strategy used when the primary fails; defaults to
            DeterministicEmbeddingStrategy of the same dimension
        dimension: Target dimension when no strategy is given
    """

    def __init__(
        self,
        primary: Optional[EmbeddingStrategy] = None,
        fallback: Optional[EmbeddingStrategy] = None,
        dimension: Optional[int] = None,
    ):
        if dimension is None:
            dimension = primary.dimension if primary is not None else DEFAULT_DIMENSIONS
        self.primary = primary
        self.fallback = fallback or DeterministicEmbeddingStrategy(dimension)
        self.fallback_count = 0

    @property
    def dimension(self) -> int:
        return self.fallback.dimension

    @property
    def strategy_name(self) -> str:
        return self.primary.name if self.primary is not None else self.fallback.name

    async def embed(self, text: str) -> List[float]:
        if self.primary is not None:
            try:
                return await self.primary.embed(text)
            except Exception as exc:
                logger.warning("Embedding provider unavailable, using fallback: %s", exc)
        self.fallback_count += 1
        return await self.fallback.embed(text)

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        if self.primary is not None:
            try:
                return await self.primary.embed_batch(texts)
            except Exception as exc:
                logger.warning(
                    "Batch embedding of %d text(s) failed, using fallback: %s", len(texts), exc
                )
        self.fallback_count += 1
        return await self.fallback.embed_batch(texts)


def create_embeddings_client(settings: RAGSettings) -> Optional[Embeddings]:
    """
    Create a LangChain embeddings client from settings.

    Returns None when no provider is configured, in which case callers
    should rely on the deterministic fallback only.
    """
    provider = settings.embedding_provider.lower()

    if provider == "openai":
        if not settings.openai_api_key:
            logger.info("OPENAI_API_KEY not set; embeddings use the deterministic fallback")
            return None
        from langchain_openai import OpenAIEmbeddings

        return OpenAIEmbeddings(
            model=settings.embed_model,
            api_key=settings.openai_api_key,
            dimensions=settings.embedding_dimensions,
        )

    if provider == "ollama":
        from langchain_community.embeddings import OllamaEmbeddings

        return OllamaEmbeddings(
            model=settings.embed_model,
            base_url=settings.ollama_base_url,
        )

    if provider not in ("", "none"):
        logger.warning("Unknown embedding provider %r; using deterministic fallback", provider)
    return None


def create_embedding_provider(
    settings: RAGSettings,
    client: Optional[Embeddings] = None,
) -> EmbeddingProvider:
    """Build an EmbeddingProvider for the configured backend."""
    if client is None:
        client = create_embeddings_client(settings)
    primary = None
    if client is not None:
        primary = RemoteEmbeddingStrategy(
            client,
            dimension=settings.embedding_dimensions,
            batch_size=settings.batch_size,
        )
    return EmbeddingProvider(primary=primary, dimension=settings.embedding_dimensions)

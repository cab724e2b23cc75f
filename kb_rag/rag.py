"""Retrieval-augmented generation façade over the knowledge base."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import List, Optional

from .embeddings import EmbeddingProvider
from .exceptions import DimensionMismatchError, RetrievalError
from .knowledge_base import KnowledgeBase
from .schemas import KnowledgeSource, RAGResult, RAGStats
from .vector_store import DEFAULT_MIN_SCORE, VectorStore

logger = logging.getLogger(__name__)

SOURCE_SEPARATOR = "\n---\n\n"


class RAGState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


def build_context(sources: List[KnowledgeSource]) -> str:
    """Join sources into a numbered, attributed context block."""
    return SOURCE_SEPARATOR.join(
        f"[Source {number}: {source.title}]\n{source.content}\n"
        for number, source in enumerate(sources, start=1)
    )


class RAGSystem:
    """
    Embeds the knowledge base into a vector store and answers queries with
    the most similar sources.

    Args:
        knowledge_base: Source collection to embed
        embedding_provider: Provider for document and query embeddings
        vector_store: Store to load; a fresh one is created if omitted
        min_score: Minimum cosine similarity for a source to be returned
        default_limit: Number of sources returned when query() gets no limit
    """

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        embedding_provider: EmbeddingProvider,
        vector_store: Optional[VectorStore] = None,
        min_score: float = DEFAULT_MIN_SCORE,
        default_limit: int = 3,
    ):
        self.knowledge_base = knowledge_base
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store if vector_store is not None else VectorStore()
        self.min_score = min_score
        self.default_limit = default_limit
        self._state = RAGState.UNINITIALIZED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> RAGState:
        return self._state

    @property
    def initialized(self) -> bool:
        return self._state is RAGState.READY

    async def initialize(self) -> None:
        if self._state is RAGState.READY:
            return
        async with self._lock:
            if self._state is RAGState.READY:
                return
            self._state = RAGState.INITIALIZING
            logger.info("Initializing RAG system...")
            try:
                await self.knowledge_base.initialize()
                self.vector_store = await self._load_store(self.vector_store)
            except Exception:
                self._state = RAGState.UNINITIALIZED
                logger.exception("RAG system initialization failed")
                raise
            self._state = RAGState.READY
            logger.info("RAG system initialized with %d vector(s)", self.vector_store.size())

    async def _load_store(self, store: VectorStore) -> VectorStore:
        sources = await self.knowledge_base.get_all_sources()
        if not sources:
            logger.warning("Knowledge base is empty; vector store left empty")
            return store

        embeddings = await self.embedding_provider.embed_batch([s.content for s in sources])
        for source, embedding in zip(sources, embeddings):
            source.embedding = embedding
        store.add_batch(sources, embeddings)
        return store

    async def refresh(self) -> None:
        """Re-ingest and re-embed everything, then swap in the new store."""
        async with self._lock:
            await self.knowledge_base.refresh()
            self.vector_store = await self._load_store(VectorStore())
            self._state = RAGState.READY
            logger.info("RAG system refreshed with %d vector(s)", self.vector_store.size())

    def clear(self) -> None:
        """Drop all vectors and sources; the next query re-initializes."""
        self.vector_store.clear()
        self.knowledge_base.reset()
        self._state = RAGState.UNINITIALIZED

    async def query(self, question: str, limit: Optional[int] = None) -> RAGResult:
        """
        Retrieve the sources most similar to a question.

        Raises:
            RetrievalError: If the store is empty, or the question cannot be
                embedded or searched
        """
        await self.initialize()

        store = self.vector_store
        if store.size() == 0:
            raise RetrievalError("Vector store is empty; nothing to retrieve")

        try:
            query_embedding = await self.embedding_provider.embed(question)
        except Exception as exc:
            raise RetrievalError(f"Could not embed query: {exc}") from exc

        try:
            sources = store.search(
                query_embedding,
                limit=self.default_limit if limit is None else limit,
                min_score=self.min_score,
            )
        except DimensionMismatchError as exc:
            raise RetrievalError(f"Query embedding does not match the store: {exc}") from exc
        return RAGResult(sources=sources, context=build_context(sources))

    async def get_stats(self) -> RAGStats:
        return RAGStats(
            state=self._state.value,
            initialized=self.initialized,
            vector_count=self.vector_store.size(),
            embedding_fallbacks=self.embedding_provider.fallback_count,
            knowledge_base=await self.knowledge_base.get_stats(),
        )

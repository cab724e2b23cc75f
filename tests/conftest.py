"""Shared fixtures for KB RAG tests."""

from typing import List, Optional

import pytest
from langchain_core.embeddings import Embeddings

from kb_rag.ingest import Ingester
from kb_rag.schemas import Category, KnowledgeSource, SourceMetadata, SourceType
from kb_rag.utils import build_source_id, infer_category


class ListIngester(Ingester):
    """Ingester returning a fixed list of sources."""

    source_type = SourceType.STATIC_PAGE

    def __init__(self, sources: List[KnowledgeSource]):
        self.sources = sources
        self.calls = 0

    async def ingest(self) -> List[KnowledgeSource]:
        self.calls += 1
        return list(self.sources)


class FailingIngester(Ingester):
    """Ingester whose origin is unreachable."""

    source_type = SourceType.REPOSITORY

    async def ingest(self) -> List[KnowledgeSource]:
        raise RuntimeError("origin unreachable")


class RecordingEmbeddings(Embeddings):
    """
    LangChain embeddings stub.

    The first component of each vector is the text length, so tests can
    check which text a vector belongs to.
    """

    def __init__(self, dimension: int = 8, failures: int = 0):
        self.dimension = dimension
        self.failures = failures
        self.calls: List[List[str]] = []

    def _vector(self, text: str) -> List[float]:
        return [float(len(text))] + [1.0] * (self.dimension - 1)

    def _maybe_fail(self) -> None:
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("quota exceeded")

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        self._maybe_fail()
        self.calls.append(list(texts))
        return [self._vector(text) for text in texts]

    def embed_query(self, text: str) -> List[float]:
        self._maybe_fail()
        return self._vector(text)


def _make_source(
    origin: str,
    content: str,
    title: Optional[str] = None,
    category: Optional[Category] = None,
    source_type: SourceType = SourceType.STATIC_PAGE,
) -> KnowledgeSource:
    return KnowledgeSource(
        id=build_source_id(source_type, origin),
        type=source_type,
        content=content,
        metadata=SourceMetadata(
            title=title,
            category=category or infer_category(title or origin, content),
        ),
    )


@pytest.fixture
def make_source():
    return _make_source


@pytest.fixture
def list_ingester():
    return ListIngester


@pytest.fixture
def failing_ingester():
    return FailingIngester()


@pytest.fixture
def recording_embeddings():
    return RecordingEmbeddings


@pytest.fixture
def gtmvp_sources():
    """Pricing, service and case-study documents."""
    return [
        _make_source(
            "mvp-cost",
            "GTMVP offers MVP development starting at $2,500",
            title="MVP Development Cost",
        ),
        _make_source(
            "ai-automation",
            "Our AI automation saves 20 hours per week",
            title="AI Automation Services",
        ),
        _make_source(
            "chatbot",
            "Case study: chatbot reduced response time to 30 seconds",
            title="Chatbot Case Study",
        ),
    ]

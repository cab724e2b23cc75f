"""Tests for KB RAG schemas."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from kb_rag.schemas import (
    Category,
    KnowledgeSource,
    SourceMetadata,
    SourceType,
    VectorEntry,
)


def test_knowledge_source_creation():
    """Test creating KnowledgeSource."""
    source = KnowledgeSource(
        id="static-page:pricing.json",
        type=SourceType.STATIC_PAGE,
        content="Starter plan is $2,500/month",
        metadata=SourceMetadata(
            title="Pricing",
            url="https://gtmvp.com/pricing",
            category=Category.PRICING,
            last_updated=datetime(2025, 1, 15),
        ),
    )

    assert source.id == "static-page:pricing.json"
    assert source.type is SourceType.STATIC_PAGE
    assert source.metadata.category is Category.PRICING
    assert source.embedding is None
    assert source.title == "Pricing"


def test_knowledge_source_accepts_string_enums():
    """Test enum fields accept their string values."""
    source = KnowledgeSource(
        id="workspace-document:ws/page-3",
        type="workspace-document",
        content="Case study content",
        metadata={"category": "case-study"},
    )

    assert source.type is SourceType.WORKSPACE_DOCUMENT
    assert source.metadata.category is Category.CASE_STUDY


def test_knowledge_source_rejects_blank_content():
    """Test that blank content is rejected."""
    with pytest.raises(ValidationError):
        KnowledgeSource(id="x", type=SourceType.REPOSITORY, content="   \n")


def test_title_falls_back_to_id():
    """Test title property without metadata title."""
    source = KnowledgeSource(id="repository:acme/site/README.md", type="repository", content="Hi")
    assert source.title == "repository:acme/site/README.md"


def test_vector_entry_shares_source():
    """Test VectorEntry keeps a reference to its source."""
    source = KnowledgeSource(id="a", type="static-page", content="text")
    entry = VectorEntry(id=source.id, embedding=[0.1, 0.2], source=source)

    assert entry.source is source
    assert entry.embedding == [0.1, 0.2]

"""Data schemas for the retrieval core."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class SourceType(str, Enum):
    """Origin kind of a knowledge source."""
    REPOSITORY = "repository"
    WORKSPACE_DOCUMENT = "workspace-document"
    STATIC_PAGE = "static-page"


class Category(str, Enum):
    """Business category used for filtering."""
    SERVICE = "service"
    PRICING = "pricing"
    CASE_STUDY = "case-study"
    TECHNICAL = "technical"


class SourceMetadata(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    category: Optional[Category] = None
    last_updated: Optional[datetime] = None


class KnowledgeSource(BaseModel):
    """A single retrievable document in the knowledge base."""
    id: str
    type: SourceType
    content: str
    metadata: SourceMetadata = Field(default_factory=SourceMetadata)
    embedding: Optional[List[float]] = None

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be empty")
        return value

    @property
    def title(self) -> str:
        return self.metadata.title or self.id


class VectorEntry(BaseModel):
    """Embedding paired with the source it was computed from."""
    id: str
    embedding: List[float]
    source: KnowledgeSource


class ScoredSource(BaseModel):
    source: KnowledgeSource
    score: float


class RAGResult(BaseModel):
    """Ranked sources and the context string assembled from them."""
    sources: List[KnowledgeSource] = Field(default_factory=list)
    context: str = ""


class KnowledgeBaseStats(BaseModel):
    total_sources: int
    by_type: Dict[str, int]
    by_category: Dict[str, int]


class RAGStats(BaseModel):
    state: str
    initialized: bool
    vector_count: int
    embedding_fallbacks: int
    knowledge_base: KnowledgeBaseStats

"""Wire ingesters, knowledge base, embeddings and vector store together."""

from __future__ import annotations

from typing import List, Optional

import httpx
from langchain_core.embeddings import Embeddings

from .config import RAGSettings
from .embeddings import create_embedding_provider
from .ingest import Ingester, RepositoryIngester, StaticPageIngester, WorkspaceIngester
from .knowledge_base import KnowledgeBase
from .rag import RAGSystem
from .vector_store import VectorStore


def build_ingesters(
    settings: RAGSettings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> List[Ingester]:
    """Create the configured ingesters, network-backed ones first."""
    return [
        RepositoryIngester(
            repositories=settings.repositories,
            token=settings.github_token,
            http_client=http_client,
            timeout=settings.fetch_timeout,
        ),
        WorkspaceIngester(
            workspace_id=settings.notion_workspace_id,
            token=settings.notion_token,
            http_client=http_client,
            timeout=settings.fetch_timeout,
        ),
        StaticPageIngester(directory=settings.scraped_dir),
    ]


def build_rag_system(
    settings: Optional[RAGSettings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    embeddings_client: Optional[Embeddings] = None,
) -> RAGSystem:
    """
    Build a RAGSystem from settings.

    Args:
        settings: Settings to use; read from the environment if omitted
        http_client: Shared client for network ingesters; each ingestion
            run opens its own client if omitted
        embeddings_client: LangChain embeddings instance overriding the
            configured provider

    Returns:
        An uninitialized RAGSystem; call initialize() or query() to load it
    """
    if settings is None:
        settings = RAGSettings.from_env()

    knowledge_base = KnowledgeBase(build_ingesters(settings, http_client=http_client))
    provider = create_embedding_provider(settings, client=embeddings_client)

    return RAGSystem(
        knowledge_base=knowledge_base,
        embedding_provider=provider,
        vector_store=VectorStore(),
        min_score=settings.min_score,
        default_limit=settings.query_limit,
    )

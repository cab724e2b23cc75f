"""KB RAG - retrieval core for knowledge-base chat."""

from .builder import build_ingesters, build_rag_system
from .config import RAGSettings, RepositoryRef
from .embeddings import (
    DeterministicEmbeddingStrategy,
    EmbeddingProvider,
    EmbeddingStrategy,
    RemoteEmbeddingStrategy,
)
from .exceptions import (
    BatchLengthMismatchError,
    DimensionMismatchError,
    EmbeddingError,
    RAGError,
    RetrievalError,
)
from .ingest import Ingester, RepositoryIngester, StaticPageIngester, WorkspaceIngester
from .knowledge_base import KnowledgeBase
from .rag import RAGState, RAGSystem
from .schemas import Category, KnowledgeSource, RAGResult, SourceMetadata, SourceType
from .vector_store import VectorStore, cosine_similarity

__version__ = "0.1.0"

__all__ = [
    "build_ingesters",
    "build_rag_system",
    "RAGSettings",
    "RepositoryRef",
    "DeterministicEmbeddingStrategy",
    "EmbeddingProvider",
    "EmbeddingStrategy",
    "RemoteEmbeddingStrategy",
    "BatchLengthMismatchError",
    "DimensionMismatchError",
    "EmbeddingError",
    "RAGError",
    "RetrievalError",
    "Ingester",
    "RepositoryIngester",
    "StaticPageIngester",
    "WorkspaceIngester",
    "KnowledgeBase",
    "RAGState",
    "RAGSystem",
    "Category",
    "KnowledgeSource",
    "RAGResult",
    "SourceMetadata",
    "SourceType",
    "VectorStore",
    "cosine_similarity",
]

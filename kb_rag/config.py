"""Runtime configuration for the retrieval core."""

from __future__ import annotations

import logging
import os
from typing import List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field


DEFAULT_REPOSITORY_PATHS = ("README.md", "docs/architecture.md")


class RepositoryRef(BaseModel):
    """A repository to ingest files from."""
    owner: str
    name: str
    branch: str = "main"
    paths: Tuple[str, ...] = DEFAULT_REPOSITORY_PATHS

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, value: str) -> "RepositoryRef":
        """Parse ``owner/name`` or ``owner/name@branch``."""
        ref, _, branch = value.strip().partition("@")
        owner, sep, name = ref.partition("/")
        if not sep or not owner or not name:
            raise ValueError(f"Invalid repository reference: {value!r}")
        return cls(owner=owner, name=name, branch=branch or "main")


DEFAULT_REPOSITORIES = [
    RepositoryRef(owner="stevekaplanai", name="gtmvp-automation"),
    RepositoryRef(owner="stevekaplanai", name="gtmvp-ads-manager"),
    RepositoryRef(owner="GTMVP", name="client-projects"),
    RepositoryRef(owner="GTMVP", name="mvp-accelerator"),
]


class RAGSettings(BaseModel):
    """Settings for ingestion, embedding and retrieval."""
    embedding_provider: str = "openai"
    embed_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    batch_size: int = 100
    openai_api_key: Optional[str] = None
    ollama_base_url: str = "http://localhost:11434"

    github_token: Optional[str] = None
    repositories: List[RepositoryRef] = Field(
        default_factory=lambda: list(DEFAULT_REPOSITORIES)
    )
    notion_token: Optional[str] = None
    notion_workspace_id: Optional[str] = None
    scraped_dir: Optional[str] = os.path.join("knowledge-base", "scraped")
    fetch_timeout: float = 5.0

    min_score: float = 0.7
    query_limit: int = 3
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RAGSettings":
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        values = {}

        def _set(field: str, key: str, cast=str) -> None:
            raw = env.get(key)
            if raw is not None and raw.strip() != "":
                values[field] = cast(raw.strip())

        _set("embedding_provider", "EMBEDDING_PROVIDER", str.lower)
        _set("embed_model", "EMBED_MODEL")
        _set("embedding_dimensions", "EMBEDDING_DIMENSIONS", int)
        _set("batch_size", "BATCH_SIZE", int)
        _set("openai_api_key", "OPENAI_API_KEY")
        _set("ollama_base_url", "OLLAMA_BASE_URL")
        _set("github_token", "GITHUB_TOKEN")
        _set("notion_token", "NOTION_TOKEN")
        _set("notion_workspace_id", "NOTION_WORKSPACE_ID")
        _set("scraped_dir", "SCRAPED_DIR")
        _set("fetch_timeout", "FETCH_TIMEOUT", float)
        _set("min_score", "RAG_MIN_SCORE", float)
        _set("query_limit", "RAG_QUERY_LIMIT", int)
        _set("log_level", "LOG_LEVEL", str.upper)

        repositories = env.get("KB_REPOSITORIES")
        if repositories and repositories.strip():
            values["repositories"] = [
                RepositoryRef.parse(item)
                for item in repositories.split(",")
                if item.strip()
            ]

        return cls(**values)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for scripts using the library."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

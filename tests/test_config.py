"""Tests for settings loading."""

import pytest

from kb_rag.config import DEFAULT_REPOSITORY_PATHS, RAGSettings, RepositoryRef


def test_defaults_without_environment():
    """Test defaults when nothing is configured."""
    settings = RAGSettings.from_env({})

    assert settings.embedding_provider == "openai"
    assert settings.embed_model == "text-embedding-3-small"
    assert settings.embedding_dimensions == 1536
    assert settings.batch_size == 100
    assert settings.fetch_timeout == 5.0
    assert settings.min_score == 0.7
    assert settings.query_limit == 3
    assert settings.openai_api_key is None
    assert len(settings.repositories) == 4


def test_from_env_overrides():
    """Test environment variables override defaults."""
    settings = RAGSettings.from_env(
        {
            "EMBEDDING_PROVIDER": "Ollama",
            "EMBED_MODEL": "mxbai-embed-large",
            "EMBEDDING_DIMENSIONS": "1024",
            "BATCH_SIZE": "32",
            "GITHUB_TOKEN": "ghp_x",
            "KB_REPOSITORIES": "acme/site, acme/api@develop",
            "FETCH_TIMEOUT": "2.5",
            "RAG_MIN_SCORE": "0.5",
            "LOG_LEVEL": "debug",
            "OPENAI_API_KEY": "   ",
        }
    )

    assert settings.embedding_provider == "ollama"
    assert settings.embed_model == "mxbai-embed-large"
    assert settings.embedding_dimensions == 1024
    assert settings.batch_size == 32
    assert settings.github_token == "ghp_x"
    assert [r.full_name for r in settings.repositories] == ["acme/site", "acme/api"]
    assert settings.repositories[1].branch == "develop"
    assert settings.fetch_timeout == 2.5
    assert settings.min_score == 0.5
    assert settings.log_level == "DEBUG"
    assert settings.openai_api_key is None


def test_repository_ref_parse():
    """Test parsing repository references."""
    ref = RepositoryRef.parse("GTMVP/client-projects")

    assert ref.owner == "GTMVP"
    assert ref.name == "client-projects"
    assert ref.branch == "main"
    assert ref.paths == DEFAULT_REPOSITORY_PATHS


@pytest.mark.parametrize("value", ["no-slash", "/name", "owner/"])
def test_repository_ref_parse_invalid(value):
    """Test malformed references are rejected."""
    with pytest.raises(ValueError):
        RepositoryRef.parse(value)

"""Tests for the knowledge base aggregator and keyword search."""

import asyncio

import pytest

from kb_rag.knowledge_base import KnowledgeBase
from kb_rag.schemas import Category


def test_inferred_categories(gtmvp_sources):
    """Test the sample documents are categorized from title and content."""
    categories = [source.metadata.category for source in gtmvp_sources]
    assert categories == [Category.PRICING, Category.SERVICE, Category.CASE_STUDY]


@pytest.mark.asyncio
async def test_keyword_search_finds_pricing(list_ingester, gtmvp_sources):
    """Test cost questions find the pricing document by keyword."""
    kb = KnowledgeBase([list_ingester(gtmvp_sources)])

    by_title = await kb.search("cost", limit=1)
    by_amount = await kb.search("$2,500")

    assert by_title == [gtmvp_sources[0]]
    assert by_amount == [gtmvp_sources[0]]


@pytest.mark.asyncio
async def test_search_ranks_by_occurrences(list_ingester, make_source):
    """Test more occurrences rank higher; ties keep ingestion order."""
    once = make_source("once", "A chatbot.")
    thrice = make_source("thrice", "Chatbot, chatbot and another CHATBOT.")
    twice = make_source("twice", "chatbot then chatbot")
    title_only = make_source("title-only", "Support automation", title="Chatbot rollout")
    kb = KnowledgeBase([list_ingester([once, thrice, twice, title_only])])

    results = await kb.search("chatbot")

    assert results == [thrice, twice, once, title_only]


@pytest.mark.asyncio
async def test_search_category_filter_and_limit(list_ingester, gtmvp_sources):
    """Test category filtering and truncation."""
    kb = KnowledgeBase([list_ingester(gtmvp_sources)])

    assert await kb.search("o", category=Category.SERVICE) == [gtmvp_sources[1]]
    assert await kb.search("o", category="case-study") == [gtmvp_sources[2]]
    assert len(await kb.search("o", limit=2)) == 2


@pytest.mark.asyncio
async def test_blank_query_matches_nothing(list_ingester, gtmvp_sources):
    """Test a blank query returns no results."""
    kb = KnowledgeBase([list_ingester(gtmvp_sources)])
    assert await kb.search("   ") == []


@pytest.mark.asyncio
async def test_query_whitespace_is_part_of_the_match(list_ingester, make_source):
    """Test surrounding spaces in the query are matched literally."""
    word = make_source("word", "What does it cost to start?")
    prefix = make_source("prefix", "Hosting costs, support and updates.")
    kb = KnowledgeBase([list_ingester([word, prefix])])

    assert await kb.search(" cost ") == [word]
    assert await kb.search("cost") == [word, prefix]


@pytest.mark.asyncio
async def test_get_sources_by_category(list_ingester, gtmvp_sources):
    """Test listing all sources of one category."""
    kb = KnowledgeBase([list_ingester(gtmvp_sources)])

    assert await kb.get_sources_by_category("pricing") == [gtmvp_sources[0]]
    assert await kb.get_sources_by_category(Category.TECHNICAL) == []


@pytest.mark.asyncio
async def test_methods_initialize_implicitly(list_ingester, gtmvp_sources):
    """Test querying before initialize() loads the sources once."""
    ingester = list_ingester(gtmvp_sources)
    kb = KnowledgeBase([ingester])

    assert not kb.initialized
    assert len(await kb.get_all_sources()) == 3
    await kb.search("chatbot")

    assert kb.initialized
    assert ingester.calls == 1


@pytest.mark.asyncio
async def test_initialize_is_idempotent(list_ingester, gtmvp_sources):
    """Test repeated and concurrent initialization ingests once."""
    ingester = list_ingester(gtmvp_sources)
    kb = KnowledgeBase([ingester])

    await asyncio.gather(kb.initialize(), kb.initialize(), kb.initialize())
    await kb.initialize()

    assert ingester.calls == 1
    assert len(kb) == 3


@pytest.mark.asyncio
async def test_failing_ingester_is_isolated(list_ingester, failing_ingester, make_source, gtmvp_sources):
    """Test one failing ingester does not lose the others' documents."""
    extra = [make_source("extra", "Extra technical notes")]
    kb = KnowledgeBase([list_ingester(gtmvp_sources), failing_ingester, list_ingester(extra)])

    sources = await kb.get_all_sources()

    assert [s.id for s in sources] == [s.id for s in gtmvp_sources + extra]


@pytest.mark.asyncio
async def test_duplicate_ids_are_overwritten(list_ingester, make_source):
    """Test a later source with the same ID replaces the earlier one."""
    old = make_source("page", "old content")
    other = make_source("other", "other content")
    new = make_source("page", "new content")
    kb = KnowledgeBase([list_ingester([old, other]), list_ingester([new])])

    sources = await kb.get_all_sources()

    assert sources == [new, other]


@pytest.mark.asyncio
async def test_refresh_replaces_collection(list_ingester, make_source):
    """Test re-ingestion swaps in the new collection without stale entries."""
    ingester = list_ingester([make_source("a", "alpha"), make_source("b", "beta")])
    kb = KnowledgeBase([ingester])
    await kb.initialize()

    ingester.sources = [make_source("c", "gamma")]
    await kb.refresh()

    assert [s.id for s in await kb.get_all_sources()] == ["static-page:c"]
    assert ingester.calls == 2


@pytest.mark.asyncio
async def test_reset(list_ingester, gtmvp_sources):
    """Test reset forces a new ingestion on next use."""
    ingester = list_ingester(gtmvp_sources)
    kb = KnowledgeBase([ingester])
    await kb.initialize()

    kb.reset()

    assert not kb.initialized
    assert len(await kb.get_all_sources()) == 3
    assert ingester.calls == 2


@pytest.mark.asyncio
async def test_stats(list_ingester, failing_ingester, gtmvp_sources):
    """Test stats count sources by type and category."""
    kb = KnowledgeBase([list_ingester(gtmvp_sources), failing_ingester])

    stats = await kb.get_stats()

    assert stats.total_sources == 3
    assert stats.by_type == {"repository": 0, "workspace-document": 0, "static-page": 3}
    assert stats.by_category == {"service": 1, "pricing": 1, "case-study": 1, "technical": 0}

"""Knowledge base combining all ingesters, with keyword search."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Union

from .ingest import Ingester
from .schemas import Category, KnowledgeBaseStats, KnowledgeSource, SourceType
from .utils import count_occurrences

logger = logging.getLogger(__name__)


class KnowledgeBase:
    """
    In-memory collection of knowledge sources from all ingesters.

    Initialization is lazy and idempotent: every query method initializes
    the collection on first use. Re-ingestion builds a new list and swaps
    it in.
    """

    def __init__(self, ingesters: Sequence[Ingester]):
        self.ingesters = list(ingesters)
        self._sources: List[KnowledgeSource] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def __len__(self) -> int:
        return len(self._sources)

    async def initialize(self) -> None:
        if self._initialized:
            return
        async with self._lock:
            if self._initialized:
                return
            self._sources = await self._ingest_all()
            self._initialized = True
            logger.info("Knowledge base initialized with %d source(s)", len(self._sources))

    async def refresh(self) -> None:
        """Re-run every ingester and replace the collection."""
        async with self._lock:
            self._sources = await self._ingest_all()
            self._initialized = True
            logger.info("Knowledge base refreshed with %d source(s)", len(self._sources))

    def reset(self) -> None:
        self._sources = []
        self._initialized = False

    async def _run_ingester(self, ingester: Ingester) -> List[KnowledgeSource]:
        try:
            sources = await ingester.ingest()
        except Exception:
            logger.exception("Ingester %s failed; continuing without it", ingester.name)
            return []
        logger.debug("Ingester %s produced %d source(s)", ingester.name, len(sources))
        return sources

    async def _ingest_all(self) -> List[KnowledgeSource]:
        results = await asyncio.gather(*(self._run_ingester(i) for i in self.ingesters))

        # Later duplicates overwrite earlier ones but keep the first position
        merged: Dict[str, KnowledgeSource] = {}
        for sources in results:
            for source in sources:
                merged[source.id] = source
        return list(merged.values())

    async def search(
        self,
        query: str,
        category: Optional[Union[Category, str]] = None,
        limit: int = 5,
    ) -> List[KnowledgeSource]:
        """
        Keyword search over content and titles.

        Args:
            query: Case-insensitive substring to look for
            category: Restrict results to this category
            limit: Maximum number of results

        Returns:
            Matching sources ranked by number of occurrences in content
        """
        await self.initialize()

        needle = query.lower()
        if not needle.strip() or limit <= 0:
            return []
        wanted = Category(category) if category is not None else None

        scored = []
        for source in self._sources:
            if wanted is not None and source.metadata.category != wanted:
                continue
            title = (source.metadata.title or "").lower()
            if needle not in source.content.lower() and needle not in title:
                continue
            scored.append((count_occurrences(source.content, needle), source))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [source for _, source in scored[:limit]]

    async def get_sources_by_category(self, category: Union[Category, str]) -> List[KnowledgeSource]:
        await self.initialize()
        wanted = Category(category)
        return [s for s in self._sources if s.metadata.category == wanted]

    async def get_all_sources(self) -> List[KnowledgeSource]:
        await self.initialize()
        return list(self._sources)

    async def get_stats(self) -> KnowledgeBaseStats:
        await self.initialize()
        sources = self._sources

        by_type = {source_type.value: 0 for source_type in SourceType}
        by_category = {category.value: 0 for category in Category}
        for source in sources:
            by_type[source.type.value] += 1
            if source.metadata.category is not None:
                by_category[source.metadata.category.value] += 1

        return KnowledgeBaseStats(
            total_sources=len(sources),
            by_type=by_type,
            by_category=by_category,
        )

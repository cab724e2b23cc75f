"""Ingesters that turn external content into knowledge sources.

Every ingester returns a list of KnowledgeSource records. A failure on one
document is logged and skips only that document; an ingester with no
configured origin returns its built-in sample set.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import RepositoryRef
from .samples import STATIC_SAMPLE_PAGES, WORKSPACE_SAMPLE_PAGES, repository_sample_files
from .schemas import Category, KnowledgeSource, SourceMetadata, SourceType
from .utils import build_source_id, infer_category, normalize_text, safe_relpath

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 5.0

FETCH_ERRORS = (httpx.HTTPError, asyncio.TimeoutError)
PAGE_ERRORS = FETCH_ERRORS + (ValueError, KeyError, TypeError, AttributeError)


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class Ingester(ABC):
    """Produces knowledge sources from one kind of origin."""

    source_type: SourceType

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def ingest(self) -> List[KnowledgeSource]:
        ...

    def _make_source(
        self,
        origin: str,
        content: Optional[str],
        title: Optional[str] = None,
        url: Optional[str] = None,
        category: Optional[Category] = None,
        last_updated: Optional[datetime] = None,
    ) -> Optional[KnowledgeSource]:
        """Build a source, or return None for documents without content."""
        if not content or not content.strip():
            logger.debug("%s: dropping empty document %s", self.name, origin)
            return None
        title = normalize_text(title) if title else None
        if category is None:
            category = infer_category(title or origin, content)
        return KnowledgeSource(
            id=build_source_id(self.source_type, origin),
            type=self.source_type,
            content=content,
            metadata=SourceMetadata(
                title=title,
                url=url,
                category=category,
                last_updated=last_updated,
            ),
        )


class HTTPIngester(Ingester):
    """Base for ingesters backed by an HTTP API."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ):
        self.http_client = http_client
        self.timeout = timeout

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.http_client is not None:
            yield self.http_client
            return
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
            yield client

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request, bounded by the ingester's timeout."""
        return await asyncio.wait_for(
            client.request(method, url, **kwargs),
            timeout=self.timeout,
        )


class RepositoryIngester(HTTPIngester):
    """Ingests files from GitHub repositories, one source per file."""

    source_type = SourceType.REPOSITORY

    RAW_BASE_URL = "https://raw.githubusercontent.com"

    def __init__(
        self,
        repositories: Sequence[RepositoryRef],
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ):
        super().__init__(http_client=http_client, timeout=timeout)
        self.repositories = list(repositories)
        self.token = token

    async def ingest(self) -> List[KnowledgeSource]:
        if not self.token:
            logger.info("No repository token configured; using sample repository content")
            return self._sample_sources()

        async with self._client() as client:
            results = await asyncio.gather(
                *(
                    self._fetch_file(client, repo, path)
                    for repo in self.repositories
                    for path in repo.paths
                )
            )

        sources = [source for source in results if source is not None]
        logger.info(
            "Ingested %d file(s) from %d repositor(ies)", len(sources), len(self.repositories)
        )
        return sources

    async def _fetch_file(
        self,
        client: httpx.AsyncClient,
        repo: RepositoryRef,
        path: str,
    ) -> Optional[KnowledgeSource]:
        url = f"{self.RAW_BASE_URL}/{repo.owner}/{repo.name}/{repo.branch}/{path}"
        try:
            response = await self._request(
                client,
                "GET",
                url,
                headers={"Authorization": f"token {self.token}"},
            )
        except FETCH_ERRORS as exc:
            logger.warning("Skipping %s/%s: %s", repo.full_name, path, _describe(exc))
            return None

        if response.status_code == 404:
            logger.warning("Skipping %s/%s: not found", repo.full_name, path)
            return None
        if response.is_error:
            logger.warning(
                "Skipping %s/%s: HTTP %d", repo.full_name, path, response.status_code
            )
            return None

        return self._file_source(repo, path, response.text)

    def _file_source(
        self,
        repo: RepositoryRef,
        path: str,
        content: str,
    ) -> Optional[KnowledgeSource]:
        return self._make_source(
            origin=f"{repo.full_name}/{path}",
            content=content,
            title=f"{repo.name}/{path}",
            url=f"https://github.com/{repo.owner}/{repo.name}/blob/{repo.branch}/{path}",
            last_updated=datetime.now(timezone.utc),
        )

    def _sample_sources(self) -> List[KnowledgeSource]:
        sources: List[KnowledgeSource] = []
        for repo in self.repositories:
            for sample in repository_sample_files(repo):
                source = self._file_source(repo, sample["path"], sample["content"])
                if source is not None:
                    sources.append(source)
        return sources


def flatten_block_text(block: Dict[str, Any]) -> str:
    """Concatenate the plain text of a block's rich-text runs."""
    block_type = block.get("type")
    payload = block.get(block_type) if block_type else None
    if not isinstance(payload, dict):
        return ""
    runs = payload.get("rich_text") or []
    return "".join(run.get("plain_text", "") for run in runs).strip()


def page_title(page: Dict[str, Any]) -> Optional[str]:
    for prop in (page.get("properties") or {}).values():
        if isinstance(prop, dict) and prop.get("type") == "title":
            title = "".join(run.get("plain_text", "") for run in prop.get("title") or [])
            return title.strip() or None
    return None


class WorkspaceIngester(HTTPIngester):
    """Ingests pages from a Notion workspace, one source per page."""

    source_type = SourceType.WORKSPACE_DOCUMENT

    API_URL = "https://api.notion.com/v1"
    API_VERSION = "2022-06-28"
    PAGE_SIZE = 100
    MAX_DEPTH = 3

    def __init__(
        self,
        workspace_id: Optional[str] = None,
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ):
        super().__init__(http_client=http_client, timeout=timeout)
        self.workspace_id = workspace_id
        self.token = token

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Notion-Version": self.API_VERSION,
        }

    async def ingest(self) -> List[KnowledgeSource]:
        if not self.token or not self.workspace_id:
            logger.info("No workspace credentials configured; using sample workspace pages")
            return self._sample_sources()

        async with self._client() as client:
            try:
                pages = await self._list_pages(client)
            except PAGE_ERRORS as exc:
                logger.warning(
                    "Could not list pages in workspace %s: %s", self.workspace_id, _describe(exc)
                )
                return []

            results = await asyncio.gather(*(self._ingest_page(client, page) for page in pages))

        sources = [source for source in results if source is not None]
        logger.info("Ingested %d page(s) from workspace %s", len(sources), self.workspace_id)
        return sources

    async def _list_pages(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        pages: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        while True:
            body: Dict[str, Any] = {
                "filter": {"property": "object", "value": "page"},
                "page_size": self.PAGE_SIZE,
            }
            if cursor:
                body["start_cursor"] = cursor
            response = await self._request(
                client, "POST", f"{self.API_URL}/search", headers=self._headers, json=body
            )
            response.raise_for_status()
            data = response.json()
            pages.extend(data.get("results") or [])
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return pages

    async def _collect_text(
        self,
        client: httpx.AsyncClient,
        block_id: str,
        depth: int = 0,
    ) -> List[str]:
        """Return block texts under block_id in document order."""
        lines: List[str] = []
        cursor: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"page_size": self.PAGE_SIZE}
            if cursor:
                params["start_cursor"] = cursor
            response = await self._request(
                client,
                "GET",
                f"{self.API_URL}/blocks/{block_id}/children",
                headers=self._headers,
                params=params,
            )
            response.raise_for_status()
            data = response.json()

            for block in data.get("results") or []:
                text = flatten_block_text(block)
                if text:
                    lines.append(text)
                if block.get("has_children") and depth < self.MAX_DEPTH:
                    lines.extend(await self._collect_text(client, block["id"], depth + 1))

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return lines

    async def _ingest_page(
        self,
        client: httpx.AsyncClient,
        page: Dict[str, Any],
    ) -> Optional[KnowledgeSource]:
        page_id = page.get("id") if isinstance(page, dict) else None
        if not page_id:
            logger.warning("Skipping workspace search result without an id")
            return None
        try:
            title = page_title(page)
            lines = await self._collect_text(client, page_id)
            return self._make_source(
                origin=f"{self.workspace_id}/{page_id}",
                content="\n".join(lines),
                title=title,
                url=page.get("url"),
                last_updated=page.get("last_edited_time"),
            )
        except PAGE_ERRORS as exc:
            logger.warning("Skipping workspace page %s: %s", page_id, _describe(exc))
            return None

    def _sample_sources(self) -> List[KnowledgeSource]:
        workspace = self.workspace_id or "sample-workspace"
        sources: List[KnowledgeSource] = []
        now = datetime.now(timezone.utc)
        for page in WORKSPACE_SAMPLE_PAGES:
            source = self._make_source(
                origin=f"{workspace}/{page['id']}",
                content=page["content"],
                title=page["title"],
                url=f"https://stevekaplanai.notion.site/{page['id']}",
                last_updated=now,
            )
            if source is not None:
                sources.append(source)
        return sources


class StaticPage(BaseModel):
    """A pre-scraped web page stored as JSON."""
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    content: str = ""
    last_updated: Optional[datetime] = Field(default=None, alias="lastUpdated")


def _declared_category(value: Optional[str]) -> Optional[Category]:
    if not value:
        return None
    try:
        return Category(value.strip().lower())
    except ValueError:
        return None


class StaticPageIngester(Ingester):
    """Ingests pre-scraped page JSON files from a local directory."""

    source_type = SourceType.STATIC_PAGE

    def __init__(self, directory: Optional[str] = None):
        self.directory = directory

    async def ingest(self) -> List[KnowledgeSource]:
        if not self.directory or not Path(self.directory).is_dir():
            logger.info("Static page directory not found (%s); using sample pages", self.directory)
            return self._sample_sources()

        directory = Path(self.directory)
        sources: List[KnowledgeSource] = []
        for path in sorted(directory.glob("*.json")):
            try:
                page = StaticPage.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, ValidationError) as exc:
                logger.warning("Skipping static page %s: %s", path.name, exc)
                continue

            source = self._page_source(safe_relpath(str(path), str(directory)), page)
            if source is not None:
                sources.append(source)

        logger.info("Ingested %d static page(s) from %s", len(sources), directory)
        return sources

    def _page_source(self, origin: str, page: StaticPage) -> Optional[KnowledgeSource]:
        return self._make_source(
            origin=origin,
            content=page.content,
            title=page.title,
            url=page.url,
            category=_declared_category(page.category),
            last_updated=page.last_updated,
        )

    def _sample_sources(self) -> List[KnowledgeSource]:
        sources: List[KnowledgeSource] = []
        for sample in STATIC_SAMPLE_PAGES:
            page = StaticPage.model_validate(sample)
            source = self._page_source(sample["slug"], page)
            if source is not None:
                sources.append(source)
        return sources

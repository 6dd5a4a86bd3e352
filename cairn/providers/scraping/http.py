"""HTTP client for the page extraction endpoint.

Request body: {"url": str}.
Response body: {"success": true, "title": str, "blocks": [{id?, type, data}],
"metadata": {platform, internalLinks, hasBlog, blogUrls, hasKnowledgeBase,
kbUrls}} or {"success": false, "error": str}.

Site analysis sends {"url": str, "action": "analyze-site"} and gets back
{"success": true, "siteName", "platform", "baseUrl", "pages": [{url, title,
type, source}], "navigation", "hasBlog", "hasKnowledgeBase"}.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from cairn.blocks.models import Block, BlockOrigin, normalize_block_type
from cairn.observability.logging import get_logger
from cairn.providers.errors import (
    BackendUnavailableError,
    InvalidResponseError,
    ProviderError,
    RateLimitError,
)
from cairn.providers.scraping.base import (
    DiscoveredPage,
    ScrapeResult,
    ScrapingBackend,
    SiteStructure,
)

logger = get_logger(__name__)


class HttpScrapingBackend(ScrapingBackend):
    """Scraping backend reached over HTTP."""

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "HttpScrapingBackend":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def scrape(self, url: str) -> ScrapeResult:
        data = await self._post({"url": url}, "Migration failed")
        metadata = data.get("metadata") or {}
        return ScrapeResult(
            page_title=data.get("title"),
            detected_platform=metadata.get("platform"),
            candidate_blocks=self._parse_blocks(data.get("blocks") or [], url),
            discovered_links=list(metadata.get("internalLinks") or []),
            has_blog=bool(metadata.get("hasBlog")),
            blog_urls=list(metadata.get("blogUrls") or []),
            has_knowledge_base=bool(metadata.get("hasKnowledgeBase")),
            kb_urls=list(metadata.get("kbUrls") or []),
        )

    async def analyze_site(self, url: str) -> SiteStructure:
        data = await self._post({"url": url, "action": "analyze-site"}, "Site analysis failed")
        raw_pages = data.get("pages") or []
        if not isinstance(raw_pages, list):
            raise InvalidResponseError("Site analysis pages must be a list")
        try:
            pages = [DiscoveredPage.model_validate(raw) for raw in raw_pages]
            return SiteStructure(
                site_name=data.get("siteName") or "Unknown Site",
                platform=data.get("platform") or "unknown",
                base_url=data.get("baseUrl") or url,
                pages=pages,
                navigation=[str(label) for label in data.get("navigation") or []],
                has_blog=bool(data.get("hasBlog")),
                has_knowledge_base=bool(data.get("hasKnowledgeBase")),
            )
        except ValidationError as e:
            raise InvalidResponseError(f"Invalid site analysis payload: {e}", cause=e) from e

    async def _post(self, payload: dict[str, Any], default_error: str) -> dict[str, Any]:
        try:
            response = await self._client.post(self._url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            raise BackendUnavailableError(f"Scrape request failed: {e}", cause=e) from e

        if response.status_code == 429:
            raise RateLimitError("Scraping backend rate limit exceeded")

        try:
            data = response.json()
        except ValueError as e:
            raise BackendUnavailableError(
                f"Scraping backend returned {response.status_code}", cause=e
            ) from e

        if not isinstance(data, dict):
            raise InvalidResponseError("Scrape response is not an object")
        if not data.get("success"):
            raise ProviderError(str(data.get("error") or default_error))
        return data

    @staticmethod
    def _parse_blocks(raw_blocks: list[Any], source_url: str) -> list[Block]:
        blocks: list[Block] = []
        for raw in raw_blocks:
            if not isinstance(raw, dict):
                raise InvalidResponseError("Block entries must be objects")
            block_type = normalize_block_type(str(raw.get("type", "")))
            if block_type is None:
                logger.info("scraped_block_type_unknown", block_type=raw.get("type"))
                continue
            fields: dict[str, Any] = {
                "type": block_type,
                "data": raw.get("data") or {},
                "origin": BlockOrigin.MIGRATION,
                "source_url": source_url,
            }
            if raw.get("id"):
                fields["id"] = str(raw["id"])
            try:
                blocks.append(Block(**fields))
            except ValidationError as e:
                raise InvalidResponseError(f"Invalid block payload: {e}", cause=e) from e
        return blocks

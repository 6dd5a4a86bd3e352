"""Mock scraping backend for tests and development."""

import asyncio

from cairn.providers.errors import BackendUnavailableError
from cairn.providers.scraping.base import ScrapeResult, ScrapingBackend, SiteStructure


class MockScrapingBackend(ScrapingBackend):
    """Scraping backend serving canned pages.

    Unknown URLs fail like an unreachable page unless a default result is
    configured.
    """

    def __init__(
        self,
        pages: dict[str, ScrapeResult | Exception] | None = None,
        default_result: ScrapeResult | None = None,
        sites: dict[str, SiteStructure | Exception] | None = None,
    ) -> None:
        self._pages: dict[str, ScrapeResult | Exception] = dict(pages or {})
        self._sites: dict[str, SiteStructure | Exception] = dict(sites or {})
        self._default_result = default_result
        self._call_history: list[str] = []
        self._gate = asyncio.Event()
        self._gate.set()
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def call_history(self) -> list[str]:
        return self._call_history

    def add_page(self, url: str, result: ScrapeResult | Exception) -> None:
        self._pages[url] = result

    def add_site(self, url: str, structure: SiteStructure | Exception) -> None:
        self._sites[url] = structure

    def hold(self) -> None:
        self._gate.clear()

    def release(self) -> None:
        self._gate.set()

    async def scrape(self, url: str) -> ScrapeResult:
        self._call_history.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self._gate.wait()
            await asyncio.sleep(0)
            result = self._pages.get(url, self._default_result)
            if result is None:
                raise BackendUnavailableError(f"Could not scrape page: {url}")
            if isinstance(result, Exception):
                raise result
            # Hand out fresh block objects so review state never leaks between scrapes
            return result.model_copy(deep=True)
        finally:
            self.in_flight -= 1

    async def analyze_site(self, url: str) -> SiteStructure:
        self._call_history.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self._gate.wait()
            await asyncio.sleep(0)
            structure = self._sites.get(url)
            if structure is None:
                raise BackendUnavailableError(f"Could not analyze site: {url}")
            if isinstance(structure, Exception):
                raise structure
            return structure.model_copy(deep=True)
        finally:
            self.in_flight -= 1

"""Scraping backend contract and implementations."""

from cairn.providers.scraping.base import (
    DiscoveredPage,
    DiscoveredPageSource,
    DiscoveredPageStatus,
    DiscoveredPageType,
    ScrapeResult,
    ScrapingBackend,
    SiteStructure,
)
from cairn.providers.scraping.http import HttpScrapingBackend
from cairn.providers.scraping.mock import MockScrapingBackend

__all__ = [
    "DiscoveredPage",
    "DiscoveredPageSource",
    "DiscoveredPageStatus",
    "DiscoveredPageType",
    "HttpScrapingBackend",
    "MockScrapingBackend",
    "ScrapeResult",
    "ScrapingBackend",
    "SiteStructure",
]

"""Scraping/extraction backend contract.

The backend turns a URL into a page title, the detected source platform,
candidate blocks in review order and the same-site links found on the page.
It can also analyze a whole site up front, listing the pages worth migrating.
"""

from abc import ABC, abstractmethod
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from cairn.blocks.models import Block


class ScrapeResult(BaseModel):
    """Extracted page data."""

    page_title: str | None = Field(default=None, description="Page title")
    detected_platform: str | None = Field(default=None, description="Source CMS/platform")
    candidate_blocks: list[Block] = Field(
        default_factory=list, description="Blocks in review order"
    )
    discovered_links: list[str] = Field(
        default_factory=list, description="Same-site links, absolute or relative"
    )
    has_blog: bool = Field(default=False, description="Site has a blog section")
    blog_urls: list[str] = Field(default_factory=list, description="Blog post URLs")
    has_knowledge_base: bool = Field(default=False, description="Site has a help center")
    kb_urls: list[str] = Field(default_factory=list, description="Knowledge base URLs")


class DiscoveredPageType(str, Enum):
    """Which migration phase a discovered page belongs to."""

    PAGE = "page"
    BLOG = "blog"
    KNOWLEDGE_BASE = "kb"


class DiscoveredPageSource(str, Enum):
    """Where site analysis found a page."""

    NAVIGATION = "navigation"
    SITEMAP = "sitemap"
    LINK = "link"


class DiscoveredPageStatus(str, Enum):
    """Selection and progress of a discovered page."""

    PENDING = "pending"
    MIGRATING = "migrating"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class DiscoveredPage(BaseModel):
    """One page found by site analysis."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    url: str = Field(..., description="Page URL, absolute or relative to the site")
    title: str = Field(default="", description="Page title")
    type: DiscoveredPageType = Field(default=DiscoveredPageType.PAGE, description="Page kind")
    source: DiscoveredPageSource = Field(
        default=DiscoveredPageSource.LINK, description="Where the page was found"
    )
    status: DiscoveredPageStatus = Field(
        default=DiscoveredPageStatus.PENDING, description="Selected, skipped or migrated"
    )


class SiteStructure(BaseModel):
    """Whole-site analysis: every page worth migrating, grouped by kind."""

    site_name: str = Field(default="Unknown Site", description="Site name")
    platform: str = Field(default="unknown", description="Source CMS/platform")
    base_url: str = Field(..., description="Site root URL")
    pages: list[DiscoveredPage] = Field(default_factory=list, description="Discovered pages")
    navigation: list[str] = Field(default_factory=list, description="Main navigation labels")
    has_blog: bool = Field(default=False, description="Site has a blog section")
    has_knowledge_base: bool = Field(default=False, description="Site has a help center")

    def pages_of_type(self, page_type: DiscoveredPageType) -> list[DiscoveredPage]:
        return [p for p in self.pages if p.type == page_type]

    def get_page(self, url: str) -> DiscoveredPage | None:
        for page in self.pages:
            if page.url == url:
                return page
        return None


class ScrapingBackend(ABC):
    """Abstract scraping backend."""

    @abstractmethod
    async def scrape(self, url: str) -> ScrapeResult:
        """Extract one page.

        Raises:
            ProviderError: On any backend failure
        """

    @abstractmethod
    async def analyze_site(self, url: str) -> SiteStructure:
        """Discover the pages of the site `url` belongs to.

        Raises:
            ProviderError: On any backend failure
        """

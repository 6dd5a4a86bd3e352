"""Orchestrator domain models: request outcomes, module recommendations and
migration state."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from cairn.blocks.models import Block
from cairn.conversation.models import ConversationTurn, utc_now
from cairn.providers.scraping.base import SiteStructure


class OutcomeStatus(str, Enum):
    """How an operation that may call a backend ended."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    HANDLED = "handled"  # answered locally, no backend call


class RecommendationStatus(str, Enum):
    """Module recommendation lifecycle. ACCEPTED and REJECTED are terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ModuleRecommendation(BaseModel):
    """Capabilities the agent suggests turning on before generation goes on."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    modules: list[str] = Field(default_factory=list, description="Capability ids")
    reason: str = Field(default="", description="Human-readable justification")
    status: RecommendationStatus = Field(
        default=RecommendationStatus.PENDING, description="Gate status"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")


class RequestOutcome(BaseModel):
    """Result of a facade operation."""

    status: OutcomeStatus = Field(..., description="How the operation ended")
    turn: ConversationTurn | None = Field(default=None, description="Agent turn appended")
    block: Block | None = Field(default=None, description="Block created or revised")
    recommendation: ModuleRecommendation | None = Field(
        default=None, description="Recommendation raised by the response"
    )
    error: str | None = Field(default=None, description="Failure message")

    @property
    def ok(self) -> bool:
        return self.status in (OutcomeStatus.COMPLETED, OutcomeStatus.HANDLED)


class MigrationPhase(str, Enum):
    """Migration phases, in the only order they may be visited."""

    IDLE = "idle"
    PAGES = "pages"
    BLOG = "blog"
    KNOWLEDGE_BASE = "knowledgeBase"
    COMPLETE = "complete"


PHASE_ORDER: tuple[MigrationPhase, ...] = (
    MigrationPhase.IDLE,
    MigrationPhase.PAGES,
    MigrationPhase.BLOG,
    MigrationPhase.KNOWLEDGE_BASE,
    MigrationPhase.COMPLETE,
)

REVIEW_PHASES: frozenset[MigrationPhase] = frozenset({
    MigrationPhase.PAGES,
    MigrationPhase.BLOG,
    MigrationPhase.KNOWLEDGE_BASE,
})


class DiscoveryStatus(str, Enum):
    """Whole-site analysis progress, ahead of and alongside the phases."""

    IDLE = "idle"
    ANALYZING = "analyzing"
    READY = "ready"
    MIGRATING = "migrating"
    COMPLETE = "complete"


class MigrationState(BaseModel):
    """Progress of a site migration.

    `migrated_pages` is the dedup ledger of absolute URLs already processed.
    `discovered_links` holds page links not yet migrated; blog and knowledge
    base URLs are tracked in their own lists for the later phases. A migration
    started from site analysis only walks the pages left selected in
    `site_structure`.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    source_url: str | None = Field(default=None, description="URL the migration started from")
    base_domain: str | None = Field(default=None, description="Scheme and host of the site")
    current_page_url: str | None = Field(default=None, description="Page under review")
    page_title: str | None = Field(default=None, description="Title of the page under review")
    detected_platform: str | None = Field(default=None, description="Source CMS/platform")
    phase: MigrationPhase = Field(default=MigrationPhase.IDLE, description="Current phase")

    pending_blocks: list[Block] = Field(default_factory=list, description="Review queue")
    current_block_index: int = Field(default=0, ge=0, description="Review cursor")

    discovered_links: list[str] = Field(default_factory=list, description="Unmigrated page links")
    migrated_pages: list[str] = Field(default_factory=list, description="Processed page URLs")

    pages_visited: int = Field(default=0, ge=0, description="Pages loaded in the pages phase")
    pages_completed: int = Field(default=0, ge=0, description="Pages fully reviewed")
    pages_total: int = Field(default=0, ge=0, description="Pages known in the pages phase")

    has_blog: bool = Field(default=False, description="Blog detected")
    blog_urls: list[str] = Field(default_factory=list, description="Discovered blog posts")
    blog_posts_migrated: int = Field(default=0, ge=0, description="Blog posts fully reviewed")

    has_knowledge_base: bool = Field(default=False, description="Knowledge base detected")
    kb_urls: list[str] = Field(default_factory=list, description="Discovered KB articles")
    kb_articles_migrated: int = Field(default=0, ge=0, description="KB articles fully reviewed")

    discovery_status: DiscoveryStatus = Field(
        default=DiscoveryStatus.IDLE, description="Site analysis progress"
    )
    site_structure: SiteStructure | None = Field(
        default=None, description="Pages found by site analysis, with their selection"
    )

    @property
    def is_active(self) -> bool:
        return self.phase in REVIEW_PHASES

    @property
    def current_block(self) -> Block | None:
        if self.current_block_index < len(self.pending_blocks):
            return self.pending_blocks[self.current_block_index]
        return None

    @property
    def review_complete(self) -> bool:
        return self.current_block_index >= len(self.pending_blocks)

    @property
    def blog_posts_discovered(self) -> int:
        return len(self.blog_urls)

    @property
    def kb_articles_discovered(self) -> int:
        return len(self.kb_urls)

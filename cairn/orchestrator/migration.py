"""Migration State Machine.

Walks an operator through a site page by page: each page is scraped into a
review queue of candidate blocks, every block is approved, edited or
skipped, and new same-site links are collected for later pages. Phases only
move forward: pages, then blog, then knowledge base, then complete.

A migration can also begin with a whole-site analysis, after which the
operator picks the pages to migrate and only those are walked.
"""

from urllib.parse import urljoin, urlsplit, urlunsplit

from cairn.blocks.models import Block, BlockOrigin, BlockStatus, new_block_id
from cairn.config.models import MigrationConfig
from cairn.conversation.models import ConversationTurn
from cairn.errors import DuplicateURLError, MigrationStateError
from cairn.observability.logging import get_logger
from cairn.observability.metrics import (
    BLOCKS_CREATED,
    MIGRATION_PAGES,
    SCRAPE_REQUESTS,
    SITE_ANALYSES,
)
from cairn.orchestrator.cancellation import (
    RequestCancelled,
    RequestKind,
    await_request,
    ensure_idle,
    start_request,
)
from cairn.orchestrator.capabilities import UNKNOWN_PLATFORM, CapabilityPlanner
from cairn.orchestrator.models import (
    PHASE_ORDER,
    DiscoveryStatus,
    MigrationPhase,
    MigrationState,
    OutcomeStatus,
    RequestOutcome,
)
from cairn.orchestrator.sequencer import GenerationSequencer
from cairn.orchestrator.session import SessionState
from cairn.providers.errors import ProviderError
from cairn.providers.scraping import (
    DiscoveredPage,
    DiscoveredPageStatus,
    DiscoveredPageType,
    ScrapeResult,
    ScrapingBackend,
    SiteStructure,
)

logger = get_logger(__name__)


def normalize_url(url: str, base: str | None = None) -> str | None:
    """Resolve `url` against `base` into a canonical absolute http(s) URL.

    Drops the fragment, lowercases the host and gives an empty path "/".

    Returns:
        The URL, or None if it is not an http(s) URL
    """
    joined = urljoin(base, url.strip()) if base else url.strip()
    parts = urlsplit(joined)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return urlunsplit((parts.scheme, parts.netloc.lower(), parts.path or "/", parts.query, ""))


def site_origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


class MigrationStateMachine:
    """Drives MigrationState through its phases."""

    def __init__(
        self,
        scraper: ScrapingBackend,
        sequencer: GenerationSequencer,
        planner: CapabilityPlanner,
        config: MigrationConfig | None = None,
    ) -> None:
        self._scraper = scraper
        self._sequencer = sequencer
        self._planner = planner
        self._config = config or MigrationConfig()

    # Page loading

    async def start(self, state: SessionState, url: str) -> RequestOutcome:
        """Start a migration from `url`.

        Raises:
            MigrationStateError: If a migration already ran in this session or
                the URL is not an absolute http(s) URL
            ReentrantRequestError: If a request is already in flight
        """
        normalized = self.resolve_start_url(state, url)
        ensure_idle(state)

        logger.info("migration_started", session_id=str(state.session_id), url=normalized)
        return await self._load_page(state, normalized)

    async def migrate_next_page(self, state: SessionState, url: str) -> RequestOutcome:
        """Leave the current page and load `url` in the current phase.

        Unreviewed blocks of the page being left are rejected, and that page
        is not counted as completed.

        Raises:
            MigrationStateError: If no migration is active or the URL is invalid
            DuplicateURLError: If the page was already migrated or is current
            ReentrantRequestError: If a request is already in flight
        """
        normalized = self.resolve_next_url(state, url)
        ensure_idle(state)
        return await self._load_page(state, normalized)

    def resolve_start_url(self, state: SessionState, url: str) -> str:
        """Validate a start URL and return its canonical form.

        Raises:
            MigrationStateError: If a migration already ran in this session or
                the URL is not an absolute http(s) URL
        """
        if state.migration.phase != MigrationPhase.IDLE:
            raise MigrationStateError(
                f"Migration already {state.migration.phase.value}; reset the session first"
            )
        normalized = normalize_url(url)
        if normalized is None:
            raise MigrationStateError(f"Not an absolute http(s) URL: {url}")
        return normalized

    def resolve_next_url(self, state: SessionState, url: str) -> str:
        """Resolve a page URL against the current page and refuse duplicates.

        Raises:
            MigrationStateError: If no migration is active or the URL is invalid
            DuplicateURLError: If the page was already migrated or is current
        """
        migration = self._require_active(state)
        normalized = normalize_url(url, migration.current_page_url or migration.source_url)
        if normalized is None:
            raise MigrationStateError(f"Not an http(s) URL: {url}")
        if normalized in migration.migrated_pages or normalized == migration.current_page_url:
            logger.info(
                "duplicate_page_refused",
                session_id=str(state.session_id),
                url=normalized,
            )
            raise DuplicateURLError(normalized)
        return normalized

    async def continue_migration(self, state: SessionState) -> RequestOutcome:
        """Load the next unmigrated URL of this phase, or advance the phase.

        Raises:
            MigrationStateError: If no migration is active
            ReentrantRequestError: If a request is already in flight
        """
        migration = self._require_active(state)
        url = self._next_url(migration)
        if url is not None:
            return await self.migrate_next_page(state, url)
        return await self.advance_phase(state)

    async def advance_phase(self, state: SessionState) -> RequestOutcome:
        """Move to the next phase with a URL left to migrate and load that URL.

        Raises:
            MigrationStateError: If no migration is active
            ReentrantRequestError: If a request is already in flight
        """
        migration = self._require_active(state)
        ensure_idle(state)

        self._leave_current_page(state)
        self._enter_phase(state, self._next_phase(migration))
        url = self._next_url(migration)
        if url is None:
            return RequestOutcome(status=OutcomeStatus.HANDLED, turn=state.conversation.last)
        return await self._load_page(state, url)

    def skip_phase(self, state: SessionState) -> MigrationPhase:
        """Move to the next phase with a URL left to migrate, loading nothing.

        Raises:
            MigrationStateError: If no migration is active
            ReentrantRequestError: If a request is already in flight
        """
        migration = self._require_active(state)
        ensure_idle(state)

        skipped = migration.phase
        self._leave_current_page(state)
        self._enter_phase(state, self._next_phase(migration))
        logger.info(
            "migration_phase_skipped",
            session_id=str(state.session_id),
            skipped=skipped.value,
            phase=migration.phase.value,
        )
        return migration.phase

    # Site discovery

    async def analyze_site(self, state: SessionState, url: str) -> RequestOutcome:
        """Discover the pages of the site behind `url` ahead of a migration.

        Every discovered page starts out selected. Analyzing again before the
        migration starts replaces the previous result.

        Raises:
            MigrationStateError: If a migration already ran in this session or
                the URL is not an absolute http(s) URL
            ReentrantRequestError: If a request is already in flight
        """
        normalized = self.resolve_start_url(state, url)
        ensure_idle(state)
        migration = state.migration
        previous = migration.discovery_status
        migration.discovery_status = DiscoveryStatus.ANALYZING
        self._narrate(state, f"Analyzing site structure for {normalized}...")

        handle = start_request(
            state, RequestKind.SCRAPE, lambda: self._scraper.analyze_site(normalized)
        )
        try:
            structure: SiteStructure = await await_request(state, handle)
        except RequestCancelled:
            SITE_ANALYSES.labels(outcome="cancelled").inc()
            migration.discovery_status = previous
            logger.info("site_analysis_cancelled", session_id=str(state.session_id), url=normalized)
            return RequestOutcome(status=OutcomeStatus.CANCELLED)
        except ProviderError as e:
            SITE_ANALYSES.labels(outcome="failed").inc()
            migration.discovery_status = previous
            logger.warning(
                "site_analysis_failed",
                session_id=str(state.session_id),
                url=normalized,
                error=str(e),
                error_type=type(e).__name__,
            )
            state.error = e.message
            turn = self._narrate(state, f"I couldn't analyze that site. {e.message}")
            return RequestOutcome(status=OutcomeStatus.FAILED, turn=turn, error=e.message)

        SITE_ANALYSES.labels(outcome="completed").inc()
        structure = self._normalize_structure(structure, normalized)
        migration.site_structure = structure
        migration.discovery_status = DiscoveryStatus.READY
        migration.detected_platform = self._known_platform(structure.platform)

        pages = structure.pages_of_type(DiscoveredPageType.PAGE)
        logger.info(
            "site_analyzed",
            session_id=str(state.session_id),
            url=structure.base_url,
            platform=structure.platform,
            pages=len(pages),
            blog_posts=len(structure.pages_of_type(DiscoveredPageType.BLOG)),
            kb_articles=len(structure.pages_of_type(DiscoveredPageType.KNOWLEDGE_BASE)),
        )
        turn = self._narrate(
            state, f"{structure.site_name}: found {len(pages)} pages ({structure.platform})."
        )
        if migration.detected_platform:
            await self._planner.enable_for_platform(state, migration.detected_platform)
        return RequestOutcome(status=OutcomeStatus.COMPLETED, turn=turn)

    def toggle_page_selection(self, state: SessionState, url: str) -> DiscoveredPage:
        """Flip a discovered page between selected and skipped.

        Raises:
            MigrationStateError: If there is no analysis to select from, the
                migration already started or the URL was not discovered
        """
        page = self._discovered_page(state, url)
        if page.status == DiscoveredPageStatus.PENDING:
            page.status = DiscoveredPageStatus.SKIPPED
        else:
            page.status = DiscoveredPageStatus.PENDING
        logger.info(
            "discovered_page_toggled",
            session_id=str(state.session_id),
            url=page.url,
            status=page.status.value,
        )
        return page

    def select_page(self, state: SessionState, url: str) -> DiscoveredPage:
        """Mark a discovered page for migration.

        Raises:
            MigrationStateError: If there is no analysis to select from, the
                migration already started or the URL was not discovered
        """
        page = self._discovered_page(state, url)
        page.status = DiscoveredPageStatus.PENDING
        return page

    async def migrate_selected_pages(self, state: SessionState) -> RequestOutcome:
        """Start the migration with exactly the pages left selected.

        Selected pages, blog posts and help articles become the queues of
        their phases. Links found while scraping are not added to them. If
        the first page cannot be loaded the selection is kept for a retry.

        Raises:
            MigrationStateError: If there is no analysis, the migration already
                started or nothing is selected
            ReentrantRequestError: If a request is already in flight
        """
        migration = state.migration
        structure = self._require_selection_open(state)
        selected = [p for p in structure.pages if p.status == DiscoveredPageStatus.PENDING]
        if not selected:
            raise MigrationStateError("No pages selected for migration")
        ensure_idle(state)

        pages = [p.url for p in selected if p.type == DiscoveredPageType.PAGE]
        first = pages[0] if pages else selected[0].url

        def queued(page_type: DiscoveredPageType) -> list[str]:
            return [p.url for p in selected if p.type == page_type and p.url != first]

        migration.discovered_links = queued(DiscoveredPageType.PAGE)
        migration.blog_urls = queued(DiscoveredPageType.BLOG)
        migration.kb_urls = queued(DiscoveredPageType.KNOWLEDGE_BASE)
        migration.has_blog = structure.has_blog or bool(migration.blog_urls)
        migration.has_knowledge_base = structure.has_knowledge_base or bool(migration.kb_urls)
        migration.discovery_status = DiscoveryStatus.MIGRATING
        logger.info(
            "migration_started",
            session_id=str(state.session_id),
            url=first,
            selected=len(selected),
        )
        self._narrate(state, f"Starting migration of {len(selected)} pages...")

        outcome = await self._load_page(state, first)
        if outcome.status != OutcomeStatus.COMPLETED:
            migration.discovery_status = DiscoveryStatus.READY
            migration.discovered_links = []
            migration.blog_urls = []
            migration.kb_urls = []
            migration.has_blog = False
            migration.has_knowledge_base = False
        return outcome

    # Review

    def approve(self, state: SessionState) -> Block:
        """Approve the block under review and move the cursor on.

        Raises:
            MigrationStateError: If there is no block under review
            ReentrantRequestError: If a request is already in flight
        """
        block = self._review(state, BlockStatus.APPROVED)
        BLOCKS_CREATED.labels(block_type=block.type, origin=block.origin.value).inc()
        return block

    def skip(self, state: SessionState) -> Block:
        """Reject the block under review and move the cursor on.

        Raises:
            MigrationStateError: If there is no block under review
            ReentrantRequestError: If a request is already in flight
        """
        return self._review(state, BlockStatus.REJECTED)

    async def edit(self, state: SessionState, feedback: str) -> RequestOutcome:
        """Regenerate the block under review from `feedback`.

        The revision replaces the block in place with the same id and stays
        pending; the cursor does not move.

        Raises:
            MigrationStateError: If there is no block under review
            ReentrantRequestError: If a request is already in flight
        """
        block = self._current_block(state)
        ensure_idle(state)
        migration = state.migration
        index = migration.current_block_index

        prompt = self._config.edit_prompt_template.format(block_type=block.type, feedback=feedback)
        outcome = await self._sequencer.revise_block(state, block, prompt)
        if outcome.block is None:
            return outcome

        if index < len(migration.pending_blocks) and migration.pending_blocks[index] is block:
            migration.pending_blocks[index] = outcome.block
            logger.info(
                "migration_block_revised",
                session_id=str(state.session_id),
                block_id=block.id,
                block_type=outcome.block.type,
            )
        else:
            logger.warning(
                "migration_revision_discarded",
                session_id=str(state.session_id),
                block_id=block.id,
            )
            outcome.block = None
        return outcome

    # Internals

    def _review(self, state: SessionState, status: BlockStatus) -> Block:
        block = self._current_block(state)
        ensure_idle(state)
        migration = state.migration

        block.status = status
        state.blocks.append_block(block)
        migration.current_block_index += 1
        logger.info(
            "migration_block_reviewed",
            session_id=str(state.session_id),
            block_id=block.id,
            block_type=block.type,
            status=status.value,
            index=migration.current_block_index,
            total=len(migration.pending_blocks),
        )

        if migration.review_complete:
            self._complete_page(state)
        else:
            verb = "Added" if status == BlockStatus.APPROVED else "Skipped"
            upcoming = migration.current_block
            self._narrate(
                state,
                f"{verb}. Section {migration.current_block_index + 1} of "
                f"{len(migration.pending_blocks)}: {upcoming.type if upcoming else ''}",
            )
        return block

    async def _load_page(self, state: SessionState, url: str) -> RequestOutcome:
        migration = state.migration
        starting = migration.phase == MigrationPhase.IDLE
        self._narrate(state, f"Analyzing {url}...")

        handle = start_request(state, RequestKind.SCRAPE, lambda: self._scraper.scrape(url))
        try:
            result: ScrapeResult = await await_request(state, handle)
        except RequestCancelled:
            SCRAPE_REQUESTS.labels(outcome="cancelled").inc()
            logger.info("scrape_cancelled", session_id=str(state.session_id), url=url)
            return RequestOutcome(status=OutcomeStatus.CANCELLED)
        except ProviderError as e:
            SCRAPE_REQUESTS.labels(outcome="failed").inc()
            logger.warning(
                "scrape_failed",
                session_id=str(state.session_id),
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            state.error = e.message
            turn = self._narrate(state, f"Could not analyze {url}: {e.message}")
            return RequestOutcome(status=OutcomeStatus.FAILED, turn=turn, error=e.message)

        SCRAPE_REQUESTS.labels(outcome="completed").inc()
        self._leave_current_page(state)
        if starting:
            migration.source_url = url
            migration.base_domain = site_origin(url)
            migration.phase = MigrationPhase.PAGES

        blocks = [
            block.model_copy(
                update={
                    "id": new_block_id(),
                    "status": BlockStatus.PENDING,
                    "origin": BlockOrigin.MIGRATION,
                    "source_url": url,
                }
            )
            for block in result.candidate_blocks
        ]
        migration.current_page_url = url
        migration.page_title = result.page_title
        self._mark_discovered(migration, url, DiscoveredPageStatus.MIGRATING)
        if result.detected_platform:
            migration.detected_platform = result.detected_platform
        migration.current_block_index = 0
        migration.pending_blocks = blocks
        self._merge_links(migration, url, result)
        if migration.phase == MigrationPhase.PAGES:
            migration.pages_visited += 1
            migration.pages_total = migration.pages_visited + len(migration.discovered_links)

        logger.info(
            "migration_page_loaded",
            session_id=str(state.session_id),
            url=url,
            phase=migration.phase.value,
            blocks=len(blocks),
            discovered=len(migration.discovered_links),
        )

        title = result.page_title or url
        if blocks:
            turn = self._narrate(
                state,
                f"Found {len(blocks)} sections on {title}. "
                f"Section 1 of {len(blocks)}: {blocks[0].type}",
            )
        else:
            turn = self._narrate(state, f"No sections found on {title}.")
            self._complete_page(state)

        if starting and migration.detected_platform:
            await self._planner.enable_for_platform(state, migration.detected_platform)
        return RequestOutcome(status=OutcomeStatus.COMPLETED, turn=turn)

    def _merge_links(self, migration: MigrationState, page_url: str, result: ScrapeResult) -> None:
        base_domain = migration.base_domain
        limit = self._config.max_discovered_links
        # A migration of selected pages walks the selection only
        selection_only = migration.discovery_status == DiscoveryStatus.MIGRATING

        def same_site(raw_urls: list[str]) -> list[str]:
            resolved: list[str] = []
            for raw in raw_urls:
                normalized = normalize_url(raw, page_url)
                if normalized is None or site_origin(normalized) != base_domain:
                    continue
                if normalized not in resolved:
                    resolved.append(normalized)
            return resolved

        if not selection_only:
            blog_urls = same_site(result.blog_urls)
            kb_urls = same_site(result.kb_urls)
            for target, found in ((migration.blog_urls, blog_urls), (migration.kb_urls, kb_urls)):
                merged = list(target)
                merged.extend(u for u in found if u not in merged)
                target[:] = merged
            migration.has_blog = migration.has_blog or result.has_blog or bool(blog_urls)
            migration.has_knowledge_base = (
                migration.has_knowledge_base or result.has_knowledge_base or bool(kb_urls)
            )

        excluded = set(migration.migrated_pages)
        excluded.update(migration.blog_urls, migration.kb_urls)
        excluded.update(u for u in (page_url, migration.source_url) if u)
        kept = [u for u in migration.discovered_links if u not in excluded]
        if not selection_only:
            for link in same_site(result.discovered_links)[:limit]:
                if link not in excluded and link not in kept:
                    kept.append(link)
        migration.discovered_links = kept

    def _leave_current_page(self, state: SessionState) -> None:
        migration = state.migration
        url = migration.current_page_url
        if url is None:
            return
        leftover = migration.pending_blocks[migration.current_block_index :]
        for block in leftover:
            block.status = BlockStatus.REJECTED
            state.blocks.append_block(block)
        if leftover:
            logger.info(
                "migration_page_abandoned",
                session_id=str(state.session_id),
                url=url,
                unreviewed=len(leftover),
            )
        if url not in migration.migrated_pages:
            migration.migrated_pages.append(url)
        self._mark_discovered(migration, url, DiscoveredPageStatus.COMPLETED)
        migration.current_block_index = 0
        migration.pending_blocks = []
        migration.current_page_url = None

    def _complete_page(self, state: SessionState) -> None:
        migration = state.migration
        if migration.phase == MigrationPhase.PAGES:
            migration.pages_completed += 1
        elif migration.phase == MigrationPhase.BLOG:
            migration.blog_posts_migrated += 1
        elif migration.phase == MigrationPhase.KNOWLEDGE_BASE:
            migration.kb_articles_migrated += 1
        MIGRATION_PAGES.labels(phase=migration.phase.value).inc()
        logger.info(
            "migration_page_completed",
            session_id=str(state.session_id),
            url=migration.current_page_url,
            phase=migration.phase.value,
        )

        remaining = self._remaining_urls(migration)
        if remaining:
            self._narrate(
                state,
                f"All sections reviewed. {len(remaining)} more "
                f"{self._phase_noun(migration.phase)} to migrate.",
            )
        else:
            self._narrate(state, "All sections reviewed.")

    def _enter_phase(self, state: SessionState, phase: MigrationPhase) -> None:
        migration = state.migration
        if PHASE_ORDER.index(phase) <= PHASE_ORDER.index(migration.phase):
            raise MigrationStateError(
                f"Cannot move from {migration.phase.value} to {phase.value}"
            )
        previous = migration.phase
        migration.phase = phase
        migration.current_block_index = 0
        migration.pending_blocks = []
        logger.info(
            "migration_phase_changed",
            session_id=str(state.session_id),
            previous=previous.value,
            phase=phase.value,
        )
        if phase == MigrationPhase.COMPLETE:
            if migration.discovery_status == DiscoveryStatus.MIGRATING:
                migration.discovery_status = DiscoveryStatus.COMPLETE
            self._narrate(
                state,
                f"Migration complete: {migration.pages_completed} pages, "
                f"{migration.blog_posts_migrated} blog posts and "
                f"{migration.kb_articles_migrated} help articles migrated.",
            )
        else:
            self._narrate(state, f"Moving on to {self._phase_noun(phase)}.")

    def _next_phase(self, migration: MigrationState) -> MigrationPhase:
        """First later phase with an unmigrated URL, or COMPLETE."""
        for phase in PHASE_ORDER[PHASE_ORDER.index(migration.phase) + 1 :]:
            if phase == MigrationPhase.COMPLETE:
                break
            if self._unmigrated(migration, self._urls_for(migration, phase)):
                return phase
        return MigrationPhase.COMPLETE

    def _remaining_urls(self, migration: MigrationState) -> list[str]:
        return self._unmigrated(migration, self._urls_for(migration, migration.phase))

    @staticmethod
    def _urls_for(migration: MigrationState, phase: MigrationPhase) -> list[str]:
        if phase == MigrationPhase.BLOG:
            return migration.blog_urls
        if phase == MigrationPhase.KNOWLEDGE_BASE:
            return migration.kb_urls
        if phase == MigrationPhase.PAGES:
            return migration.discovered_links
        return []

    @staticmethod
    def _unmigrated(migration: MigrationState, urls: list[str]) -> list[str]:
        return [
            u for u in urls if u not in migration.migrated_pages and u != migration.current_page_url
        ]

    def _next_url(self, migration: MigrationState) -> str | None:
        remaining = self._remaining_urls(migration)
        return remaining[0] if remaining else None

    def _normalize_structure(self, structure: SiteStructure, url: str) -> SiteStructure:
        base_url = normalize_url(structure.base_url, url) or url
        origin = site_origin(base_url)
        pages: list[DiscoveredPage] = []
        seen: set[str] = set()
        for page in structure.pages:
            normalized = normalize_url(page.url, base_url)
            if normalized is None or site_origin(normalized) != origin or normalized in seen:
                continue
            seen.add(normalized)
            pages.append(
                page.model_copy(
                    update={"url": normalized, "status": DiscoveredPageStatus.PENDING}
                )
            )
        return structure.model_copy(update={"base_url": base_url, "pages": pages})

    @staticmethod
    def _known_platform(platform: str) -> str | None:
        if not platform or platform.lower() == UNKNOWN_PLATFORM:
            return None
        return platform

    def _require_selection_open(self, state: SessionState) -> SiteStructure:
        migration = state.migration
        structure = migration.site_structure
        if structure is None:
            raise MigrationStateError("No site analysis to select pages from")
        if (
            migration.discovery_status != DiscoveryStatus.READY
            or migration.phase != MigrationPhase.IDLE
        ):
            raise MigrationStateError(
                f"Page selection is closed (discovery {migration.discovery_status.value}, "
                f"phase {migration.phase.value})"
            )
        return structure

    def _discovered_page(self, state: SessionState, url: str) -> DiscoveredPage:
        structure = self._require_selection_open(state)
        normalized = normalize_url(url, structure.base_url)
        page = structure.get_page(normalized) if normalized else None
        if page is None:
            raise MigrationStateError(f"Not a discovered page: {url}")
        return page

    def _mark_discovered(
        self, migration: MigrationState, url: str, status: DiscoveredPageStatus
    ) -> None:
        if migration.discovery_status != DiscoveryStatus.MIGRATING:
            return
        page = migration.site_structure.get_page(url) if migration.site_structure else None
        if page is not None:
            page.status = status

    def _require_active(self, state: SessionState) -> MigrationState:
        migration = state.migration
        if not migration.is_active:
            raise MigrationStateError(f"No active migration (phase {migration.phase.value})")
        return migration

    def _current_block(self, state: SessionState) -> Block:
        migration = self._require_active(state)
        block = migration.current_block
        if block is None:
            raise MigrationStateError("No block is waiting for review")
        return block

    def _narrate(self, state: SessionState, message: str) -> ConversationTurn:
        return state.conversation.append(ConversationTurn.agent(message))

    @staticmethod
    def _phase_noun(phase: MigrationPhase) -> str:
        if phase == MigrationPhase.BLOG:
            return "blog posts"
        if phase == MigrationPhase.KNOWLEDGE_BASE:
            return "help articles"
        return "pages"

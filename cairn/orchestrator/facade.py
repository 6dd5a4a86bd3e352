"""Orchestrator facade.

Single entry point for a UI or API layer. Every operation takes the
session state explicitly; the facade holds only collaborators and config.
"""

from cairn.blocks.models import Block, BlockStatus
from cairn.config.models import (
    CapabilitiesConfig,
    GateConfig,
    MigrationConfig,
    SequencerConfig,
)
from cairn.config.settings import Settings
from cairn.conversation.models import ConversationTurn
from cairn.errors import BlockNotFoundError
from cairn.observability.logging import get_logger
from cairn.orchestrator.cancellation import cancel_request, ensure_idle
from cairn.orchestrator.capabilities import CapabilityPlanner
from cairn.orchestrator.gate import ModuleGate
from cairn.orchestrator.migration import MigrationStateMachine
from cairn.orchestrator.models import (
    MigrationPhase,
    ModuleRecommendation,
    OutcomeStatus,
    RequestOutcome,
)
from cairn.orchestrator.sequencer import GenerationSequencer
from cairn.orchestrator.session import SessionState
from cairn.orchestrator.shortcuts import ShortcutKind, match_shortcut
from cairn.providers.capabilities import CapabilityStore
from cairn.providers.generation import GenerationBackend
from cairn.providers.scraping import DiscoveredPage, ScrapingBackend

logger = get_logger(__name__)


class Orchestrator:
    """Guided content orchestration over injected collaborators.

    Operations that talk to a backend are coroutines and report backend
    failures and cancellation through RequestOutcome. Errors raised out of
    them mean the operation was refused before anything changed.
    """

    def __init__(
        self,
        generation: GenerationBackend,
        scraping: ScrapingBackend,
        capabilities: CapabilityStore,
        *,
        sequencer_config: SequencerConfig | None = None,
        gate_config: GateConfig | None = None,
        migration_config: MigrationConfig | None = None,
        capabilities_config: CapabilitiesConfig | None = None,
    ) -> None:
        self.planner = CapabilityPlanner(capabilities, capabilities_config, migration_config)
        self.sequencer = GenerationSequencer(generation, self.planner, sequencer_config)
        self.gate = ModuleGate(self.sequencer, self.planner, gate_config)
        self.migration = MigrationStateMachine(
            scraping, self.sequencer, self.planner, migration_config
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        generation: GenerationBackend,
        scraping: ScrapingBackend,
        capabilities: CapabilityStore,
    ) -> "Orchestrator":
        return cls(
            generation,
            scraping,
            capabilities,
            sequencer_config=settings.sequencer,
            gate_config=settings.gate,
            migration_config=settings.migration,
            capabilities_config=settings.capabilities,
        )

    def new_session(self) -> SessionState:
        state = SessionState()
        logger.info("session_created", session_id=str(state.session_id))
        return state

    # Conversation

    async def send_message(self, state: SessionState, text: str) -> RequestOutcome:
        """Handle a user message.

        Shortcuts are answered locally; anything else becomes a generation
        request, switching auto-continue on first if the message asks for a
        whole page.

        Raises:
            ValueError: If the message is blank
            ReentrantRequestError: If a request is already in flight
        """
        text = text.strip()
        if not text:
            raise ValueError("Message is empty")
        ensure_idle(state)

        shortcut = match_shortcut(text, state.migration)
        if shortcut is not None:
            logger.info(
                "shortcut_matched",
                session_id=str(state.session_id),
                shortcut=shortcut.kind.value,
            )
            if shortcut.kind == ShortcutKind.MIGRATE:
                url = shortcut.url or ""
                starting = state.migration.phase == MigrationPhase.IDLE
                if starting:
                    self.migration.resolve_start_url(state, url)
                else:
                    self.migration.resolve_next_url(state, url)
                state.conversation.append(ConversationTurn.user(text))
                if starting:
                    return await self.start_migration(state, url)
                return await self.migrate_next_page(state, url)

            state.conversation.append(ConversationTurn.user(text))
            if shortcut.kind == ShortcutKind.APPROVE:
                block = await self.approve_migration_block(state)
                return RequestOutcome(
                    status=OutcomeStatus.HANDLED, block=block, turn=state.conversation.last
                )
            if shortcut.kind == ShortcutKind.SKIP:
                block = self.skip_migration_block(state)
                return RequestOutcome(
                    status=OutcomeStatus.HANDLED, block=block, turn=state.conversation.last
                )
            self.skip_phase(state)
            return RequestOutcome(status=OutcomeStatus.HANDLED, turn=state.conversation.last)

        if self.sequencer.wants_auto_continue(text):
            self.sequencer.start_auto_continue(state)
        return await self.sequencer.request_generation(state, text)

    def start_auto_continue(self, state: SessionState) -> None:
        """Switch auto-continue on and queue the next missing block type."""
        self.sequencer.start_auto_continue(state, schedule=state.inflight is None)

    def stop_auto_continue(self, state: SessionState) -> None:
        self.sequencer.stop_auto_continue(state)

    def cancel(self, state: SessionState) -> None:
        """Abort the in-flight request and stop auto-continue. Idempotent."""
        cancelled = cancel_request(state)
        self.sequencer.stop_auto_continue(state)
        if cancelled:
            logger.info("request_cancelled", session_id=str(state.session_id))

    def reset(self, state: SessionState) -> SessionState:
        """Cancel everything and clear the session in place."""
        self.cancel(state)
        state.clear()
        logger.info("session_reset", session_id=str(state.session_id))
        return state

    async def drain(self, state: SessionState) -> None:
        """Wait for auto-continue and any in-flight request to settle."""
        await self.sequencer.drain(state)

    # Chat blocks

    async def approve_block(self, state: SessionState, block_id: str) -> Block:
        """Approve a block and enable the capability it needs.

        Raises:
            BlockNotFoundError: If the id is not in the block queue
        """
        block = state.blocks.set_block_status(block_id, BlockStatus.APPROVED)
        await self.planner.enable_for_block(state, block.type)
        return block

    def reject_block(self, state: SessionState, block_id: str) -> Block:
        """Reject a block. It stays in the queue but is no longer approved.

        Raises:
            BlockNotFoundError: If the id is not in the block queue
        """
        return state.blocks.set_block_status(block_id, BlockStatus.REJECTED)

    async def regenerate_block(
        self,
        state: SessionState,
        block_id: str,
        feedback: str | None = None,
    ) -> RequestOutcome:
        return await self.sequencer.regenerate_block(state, block_id, feedback)

    def approved_blocks(self, state: SessionState) -> list[Block]:
        return state.blocks.approved_blocks()

    def get_block(self, state: SessionState, block_id: str) -> Block:
        block = state.blocks.get(block_id)
        if block is None:
            raise BlockNotFoundError(block_id)
        return block

    # Module gate

    async def accept_modules(self, state: SessionState) -> RequestOutcome:
        return await self.gate.accept(state)

    def reject_modules(self, state: SessionState) -> ModuleRecommendation:
        return self.gate.reject(state)

    # Site discovery

    async def analyze_site(self, state: SessionState, url: str) -> RequestOutcome:
        return await self.migration.analyze_site(state, url)

    def toggle_page_selection(self, state: SessionState, url: str) -> DiscoveredPage:
        return self.migration.toggle_page_selection(state, url)

    def select_page(self, state: SessionState, url: str) -> DiscoveredPage:
        return self.migration.select_page(state, url)

    async def migrate_selected_pages(self, state: SessionState) -> RequestOutcome:
        return await self.migration.migrate_selected_pages(state)

    # Migration

    async def start_migration(self, state: SessionState, url: str) -> RequestOutcome:
        return await self.migration.start(state, url)

    async def approve_migration_block(self, state: SessionState) -> Block:
        block = self.migration.approve(state)
        await self.planner.enable_for_block(state, block.type)
        return block

    def skip_migration_block(self, state: SessionState) -> Block:
        return self.migration.skip(state)

    async def edit_migration_block(self, state: SessionState, feedback: str) -> RequestOutcome:
        return await self.migration.edit(state, feedback)

    async def migrate_next_page(self, state: SessionState, url: str) -> RequestOutcome:
        return await self.migration.migrate_next_page(state, url)

    async def continue_migration(self, state: SessionState) -> RequestOutcome:
        return await self.migration.continue_migration(state)

    async def advance_phase(self, state: SessionState) -> RequestOutcome:
        return await self.migration.advance_phase(state)

    def skip_phase(self, state: SessionState) -> MigrationPhase:
        return self.migration.skip_phase(state)

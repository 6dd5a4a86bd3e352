"""Generation Request Sequencer.

Owns every call to the generation backend: one in flight per session,
cancellable, and, in auto-continue mode, chained through a fixed sequence
of block types with at most one scheduled continuation at a time.
"""

import asyncio
from collections.abc import Awaitable, Callable

from cairn.blocks.models import Block, BlockOrigin, BlockStatus
from cairn.config.models import SequencerConfig
from cairn.conversation.models import ConversationTurn
from cairn.errors import BlockNotFoundError, OrchestratorError
from cairn.observability.logging import get_logger
from cairn.observability.metrics import (
    AUTO_CONTINUE_STEPS,
    BLOCKS_CREATED,
    GENERATION_REQUESTS,
)
from cairn.orchestrator.cancellation import (
    RequestCancelled,
    RequestKind,
    await_request,
    ensure_idle,
    start_request,
)
from cairn.orchestrator.capabilities import CapabilityPlanner
from cairn.orchestrator.gate import open_recommendation
from cairn.orchestrator.models import OutcomeStatus, RequestOutcome
from cairn.orchestrator.session import SessionState
from cairn.orchestrator.tool_calls import (
    ActivateModules,
    CreateBlock,
    Unrecognized,
    decode_tool_call,
)
from cairn.providers.errors import ProviderError
from cairn.providers.generation import (
    GenerationBackend,
    GenerationRequest,
    GenerationResponse,
    MigrationContext,
)

logger = get_logger(__name__)

BeforeDispatch = Callable[[], Awaitable[None]]


class GenerationSequencer:
    """Issues generation requests and drives auto-continue."""

    def __init__(
        self,
        backend: GenerationBackend,
        planner: CapabilityPlanner,
        config: SequencerConfig | None = None,
    ) -> None:
        self._backend = backend
        self._planner = planner
        self._config = config or SequencerConfig()

    @property
    def config(self) -> SequencerConfig:
        return self._config

    def next_block_type(self, state: SessionState) -> str | None:
        """First sequence type with no live block in the queue.

        Always reads the queue as it is now; callers must not cache the answer
        across an await.
        """
        for block_type in self._config.auto_continue_sequence:
            if not state.blocks.has_type(block_type):
                return block_type
        return None

    def wants_auto_continue(self, text: str) -> bool:
        """Whether a user message asks for a whole page."""
        lowered = text.lower()
        return any(phrase in lowered for phrase in self._config.full_page_phrases)

    async def request_generation(
        self,
        state: SessionState,
        prompt: str,
        *,
        before_dispatch: BeforeDispatch | None = None,
    ) -> RequestOutcome:
        """Send `prompt` as a user turn and handle the backend's answer.

        `before_dispatch`, if given, runs inside the in-flight request just
        before the backend is called.

        Raises:
            ReentrantRequestError: If a request is already in flight
        """
        ensure_idle(state)
        state.conversation.append(ConversationTurn.user(prompt))

        try:
            response = await self._dispatch(state, before_dispatch)
        except RequestCancelled:
            GENERATION_REQUESTS.labels(outcome="cancelled").inc()
            logger.info("generation_cancelled", session_id=str(state.session_id))
            return RequestOutcome(status=OutcomeStatus.CANCELLED)
        except ProviderError as e:
            return self._fail(state, e)

        GENERATION_REQUESTS.labels(outcome="completed").inc()
        turn = state.conversation.append(
            ConversationTurn.agent(response.message, response.tool_call)
        )
        outcome = RequestOutcome(status=OutcomeStatus.COMPLETED, turn=turn)
        directive = decode_tool_call(response.tool_call) if response.tool_call else None
        if isinstance(directive, ActivateModules):
            outcome.recommendation = open_recommendation(
                state, directive.modules, directive.reason
            )
        elif isinstance(directive, CreateBlock):
            block = state.blocks.append_block(
                Block(
                    type=directive.block_type,
                    data=directive.data,
                    status=BlockStatus.APPROVED,
                    origin=BlockOrigin.CHAT,
                )
            )
            BLOCKS_CREATED.labels(block_type=block.type, origin=block.origin.value).inc()
            logger.info(
                "block_created",
                session_id=str(state.session_id),
                block_id=block.id,
                block_type=block.type,
            )
            outcome.block = block
        elif isinstance(directive, Unrecognized):
            logger.warning(
                "tool_call_ignored",
                session_id=str(state.session_id),
                tool_name=directive.name,
            )

        if state.auto_continue:
            self._after_step(state)
        if outcome.block is not None:
            await self._planner.enable_for_block(state, outcome.block.type)
        return outcome

    async def revise_block(
        self,
        state: SessionState,
        block: Block,
        prompt: str,
    ) -> RequestOutcome:
        """Ask the backend for a new version of `block`.

        The replacement keeps the block's id, origin and source URL and is not
        queued anywhere; the caller decides where it goes. `outcome.block` is
        None if the backend answered without creating a block.

        Raises:
            ReentrantRequestError: If a request is already in flight
        """
        ensure_idle(state)
        state.conversation.append(ConversationTurn.user(prompt))

        try:
            response = await self._dispatch(state, None)
        except RequestCancelled:
            GENERATION_REQUESTS.labels(outcome="cancelled").inc()
            logger.info("revision_cancelled", session_id=str(state.session_id))
            return RequestOutcome(status=OutcomeStatus.CANCELLED)
        except ProviderError as e:
            return self._fail(state, e)

        GENERATION_REQUESTS.labels(outcome="completed").inc()
        turn = state.conversation.append(
            ConversationTurn.agent(response.message, response.tool_call)
        )
        outcome = RequestOutcome(status=OutcomeStatus.COMPLETED, turn=turn)
        directive = decode_tool_call(response.tool_call) if response.tool_call else None
        if isinstance(directive, CreateBlock):
            outcome.block = Block(
                id=block.id,
                type=directive.block_type,
                data=directive.data,
                status=BlockStatus.PENDING,
                origin=block.origin,
                source_url=block.source_url,
            )
        else:
            logger.warning(
                "revision_without_block",
                session_id=str(state.session_id),
                block_id=block.id,
            )
        return outcome

    async def regenerate_block(
        self,
        state: SessionState,
        block_id: str,
        feedback: str | None = None,
    ) -> RequestOutcome:
        """Reject a chat block and ask for a replacement of the same type.

        Raises:
            BlockNotFoundError: If the id is not in the block queue
            ReentrantRequestError: If a request is already in flight
        """
        block = state.blocks.get(block_id)
        if block is None:
            raise BlockNotFoundError(block_id)
        ensure_idle(state)

        state.blocks.set_block_status(block_id, BlockStatus.REJECTED)
        if feedback:
            prompt = self._config.regenerate_prompt_template.format(
                block_type=block.type, feedback=feedback
            )
        else:
            prompt = self._config.regenerate_default_prompt_template.format(
                block_type=block.type
            )
        logger.info(
            "block_regeneration_requested",
            session_id=str(state.session_id),
            block_id=block_id,
            block_type=block.type,
        )
        return await self.request_generation(state, prompt)

    def start_auto_continue(self, state: SessionState, *, schedule: bool = False) -> None:
        """Turn auto-continue on.

        With `schedule`, a continuation is queued right away instead of
        waiting for the next block to be created.
        """
        if not state.auto_continue:
            logger.info("auto_continue_started", session_id=str(state.session_id))
        state.auto_continue = True
        state.auto_continue_steps = 0
        if not schedule:
            return
        if self.next_block_type(state) is None:
            self._finish_auto_continue(state)
        else:
            self._schedule_continuation(state)

    def stop_auto_continue(self, state: SessionState) -> None:
        """Turn auto-continue off and invalidate any scheduled continuation."""
        if state.auto_continue:
            logger.info("auto_continue_stopped", session_id=str(state.session_id))
        state.auto_continue = False
        self._cancel_continuation(state)

    async def drain(self, state: SessionState) -> None:
        """Wait until no continuation is scheduled or running and no request
        is in flight.

        Raises:
            Exception: An unexpected error that ended a continuation
        """
        while state.continuation is not None or state.inflight is not None:
            task = state.continuation
            if task is None:
                await asyncio.gather(state.inflight.task, return_exceptions=True)
                # Let the awaiting coroutine release the slot
                await asyncio.sleep(0)
                continue
            (result,) = await asyncio.gather(task, return_exceptions=True)
            if state.continuation is task:
                state.continuation = None
            if isinstance(result, Exception):
                raise result

    async def _dispatch(
        self,
        state: SessionState,
        before_dispatch: BeforeDispatch | None,
    ) -> GenerationResponse:
        history = list(state.conversation.turns)
        migration = state.migration
        context = None
        if migration.is_active:
            context = MigrationContext(
                source_url=migration.current_page_url,
                platform=migration.detected_platform,
            )

        async def call() -> GenerationResponse:
            if before_dispatch is not None:
                await before_dispatch()
            request = GenerationRequest(
                conversation_history=history,
                current_capabilities=await self._planner.store.enabled(),
                migration_context=context,
            )
            return await self._backend.generate(request)

        handle = start_request(state, RequestKind.GENERATION, call)
        return await await_request(state, handle)

    def _fail(self, state: SessionState, error: ProviderError) -> RequestOutcome:
        GENERATION_REQUESTS.labels(outcome="failed").inc()
        logger.warning(
            "generation_failed",
            session_id=str(state.session_id),
            error=str(error),
            error_type=type(error).__name__,
            auto_continue=state.auto_continue,
        )
        state.error = error.message
        if state.auto_continue:
            self.stop_auto_continue(state)
        return RequestOutcome(status=OutcomeStatus.FAILED, error=error.message)

    def _after_step(self, state: SessionState) -> None:
        """Schedule the next continuation after a completed request, whether
        or not it created a block."""
        pending = state.pending_recommendation
        if pending is not None:
            # The gate waits for the operator
            logger.info(
                "auto_continue_paused_for_recommendation",
                session_id=str(state.session_id),
                recommendation_id=str(pending.id),
            )
            self.stop_auto_continue(state)
            return
        if self.next_block_type(state) is None:
            self._finish_auto_continue(state)
            return
        if state.auto_continue_steps >= len(self._config.auto_continue_sequence):
            logger.warning(
                "auto_continue_budget_exhausted",
                session_id=str(state.session_id),
                steps=state.auto_continue_steps,
            )
            self.stop_auto_continue(state)
            return
        self._schedule_continuation(state)

    def _finish_auto_continue(self, state: SessionState) -> None:
        logger.info(
            "auto_continue_completed",
            session_id=str(state.session_id),
            steps=state.auto_continue_steps,
        )
        state.auto_continue = False
        self._cancel_continuation(state)

    def _schedule_continuation(self, state: SessionState) -> None:
        self._cancel_continuation(state)
        state.continuation = asyncio.create_task(self._continue_after_delay(state))

    def _cancel_continuation(self, state: SessionState) -> None:
        task = state.continuation
        running = state.continuation_running
        state.continuation = None
        state.continuation_running = False
        if task is None or task is asyncio.current_task() or task.done():
            return
        # A continuation whose request is already out is left to finish
        if not running:
            task.cancel()

    async def _continue_after_delay(self, state: SessionState) -> None:
        await asyncio.sleep(self._config.auto_continue_delay_seconds)
        try:
            await self._fire_continuation(state)
        finally:
            # Stays registered until its request is done so drain() can wait on it
            if state.continuation is asyncio.current_task():
                state.continuation = None
                state.continuation_running = False

    async def _fire_continuation(self, state: SessionState) -> None:
        if not state.auto_continue:
            AUTO_CONTINUE_STEPS.labels(result="stopped").inc()
            return
        if state.inflight is not None:
            # The request in flight schedules the next step when it completes
            AUTO_CONTINUE_STEPS.labels(result="dropped").inc()
            logger.info(
                "auto_continue_step_dropped",
                session_id=str(state.session_id),
                in_flight=state.inflight.kind.value,
            )
            return
        next_type = self.next_block_type(state)
        if next_type is None:
            self._finish_auto_continue(state)
            return

        AUTO_CONTINUE_STEPS.labels(result="fired").inc()
        state.auto_continue_steps += 1
        state.continuation_running = True
        logger.info(
            "auto_continue_step",
            session_id=str(state.session_id),
            block_type=next_type,
            step=state.auto_continue_steps,
        )
        prompt = self._config.continue_prompt_template.format(block_type=next_type)
        try:
            await self.request_generation(state, prompt)
        except OrchestratorError as e:
            logger.warning(
                "auto_continue_step_refused",
                session_id=str(state.session_id),
                error=e.message,
                error_type=type(e).__name__,
            )
            state.error = e.message
            self.stop_auto_continue(state)
        except Exception:
            logger.exception("auto_continue_step_error", session_id=str(state.session_id))
            # Left registered so drain() surfaces the error
            state.auto_continue = False
            raise

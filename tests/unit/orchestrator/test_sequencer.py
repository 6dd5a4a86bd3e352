"""Tests for the Generation Request Sequencer."""

import asyncio

import pytest
from prometheus_client import REGISTRY

from cairn.blocks import BlockStatus
from cairn.config.models import SequencerConfig
from cairn.conversation import Role, ToolCall
from cairn.errors import BlockNotFoundError, ReentrantRequestError
from cairn.orchestrator import Orchestrator, OutcomeStatus, SessionState
from cairn.providers.capabilities import InMemoryCapabilityStore
from cairn.providers.errors import BackendUnavailableError, RateLimitError
from cairn.providers.generation import (
    GenerationResponse,
    MockGenerationBackend,
    block_response,
)
from tests.factories import BlockFactory, follow_continue_prompts

FULL_SEQUENCE = ["hero", "features", "testimonials", "cta", "contact"]


def _prompts(generation: MockGenerationBackend) -> list[str]:
    return [request.conversation_history[-1].content for request in generation.call_history]


class TestRequestGeneration:
    """Tests for a single generation request."""

    @pytest.mark.asyncio
    async def test_block_created_and_auto_approved(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(block_response("hero", message="A hero for you", title="Welcome"))

        outcome = await orchestrator.send_message(session, "add a hero")

        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.block is not None
        assert outcome.block.type == "hero"
        assert outcome.block.status == BlockStatus.APPROVED
        assert outcome.block.data == {"title": "Welcome"}
        assert [t.role for t in session.conversation] == [Role.USER, Role.AGENT]
        assert session.conversation.last.content == "A hero for you"
        assert session.conversation.last.tool_call is not None
        assert orchestrator.approved_blocks(session) == [outcome.block]

    @pytest.mark.asyncio
    async def test_request_carries_history_and_capabilities(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
        capability_store: InMemoryCapabilityStore,
    ) -> None:
        await capability_store.enable(["forms"])
        await orchestrator.send_message(session, "first")
        await orchestrator.send_message(session, "second")

        request = generation.call_history[-1]
        assert [t.content for t in request.conversation_history] == [
            "first",
            "Mock response",
            "second",
        ]
        assert request.current_capabilities == ["forms"]
        assert request.migration_context is None

    @pytest.mark.asyncio
    async def test_plain_message_creates_nothing(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
    ) -> None:
        outcome = await orchestrator.send_message(session, "what can you do?")

        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.block is None
        assert outcome.turn is session.conversation.last
        assert len(session.blocks) == 0

    @pytest.mark.asyncio
    async def test_unrecognized_tool_call_ignored(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(
            GenerationResponse(message="hm", tool_call=ToolCall(name="create_spaceship_block"))
        )
        outcome = await orchestrator.send_message(session, "build a spaceship")

        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.block is None
        assert len(session.blocks) == 0
        assert len(session.conversation) == 2

    @pytest.mark.asyncio
    async def test_failure_sets_error_without_agent_turn(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(BackendUnavailableError("backend down"))

        outcome = await orchestrator.send_message(session, "hello")

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error == "backend down"
        assert session.error == "backend down"
        assert [t.role for t in session.conversation] == [Role.USER]
        assert not session.is_loading

    @pytest.mark.asyncio
    async def test_next_request_clears_error(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(RateLimitError("slow down"))
        await orchestrator.send_message(session, "hello")
        assert session.error == "slow down"

        await orchestrator.send_message(session, "hello again")
        assert session.error is None

    @pytest.mark.asyncio
    async def test_blank_message_refused(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
    ) -> None:
        with pytest.raises(ValueError):
            await orchestrator.send_message(session, "   ")
        assert len(session.conversation) == 0

    @pytest.mark.asyncio
    async def test_block_capability_enabled(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
        capability_store: InMemoryCapabilityStore,
    ) -> None:
        generation.enqueue(block_response("booking"), block_response("smart-booking"))

        await orchestrator.send_message(session, "add booking")
        await orchestrator.send_message(session, "add smart booking")

        assert await capability_store.enabled() == ["bookings"]
        assert capability_store.enable_calls == [["bookings"]]

    @pytest.mark.asyncio
    async def test_metrics_recorded(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        def sample(outcome: str) -> float:
            return (
                REGISTRY.get_sample_value(
                    "cairn_generation_requests_total", {"outcome": outcome}
                )
                or 0.0
            )

        completed, failed = sample("completed"), sample("failed")
        generation.enqueue(block_response("hero"), BackendUnavailableError("down"))

        await orchestrator.send_message(session, "one")
        await orchestrator.send_message(session, "two")

        assert sample("completed") == completed + 1
        assert sample("failed") == failed + 1


class TestSingleFlight:
    """At most one generation call is outstanding per session."""

    @pytest.mark.asyncio
    async def test_reentrant_message_refused(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.hold()
        task = asyncio.create_task(orchestrator.send_message(session, "first"))
        await asyncio.sleep(0)
        assert session.is_loading

        with pytest.raises(ReentrantRequestError):
            await orchestrator.send_message(session, "second")
        assert [t.content for t in session.conversation] == ["first"]

        generation.release()
        outcome = await task
        assert outcome.status == OutcomeStatus.COMPLETED
        assert generation.max_in_flight == 1
        assert generation.call_count == 1

    @pytest.mark.asyncio
    async def test_sessions_are_independent(
        self,
        orchestrator: Orchestrator,
        generation: MockGenerationBackend,
    ) -> None:
        first, second = orchestrator.new_session(), orchestrator.new_session()
        generation.hold()
        task = asyncio.create_task(orchestrator.send_message(first, "one"))
        await asyncio.sleep(0)

        other = asyncio.create_task(orchestrator.send_message(second, "two"))
        await asyncio.sleep(0)
        generation.release()
        await asyncio.gather(task, other)

        assert len(first.conversation) == 2
        assert len(second.conversation) == 2


class TestCancel:
    """Tests for cancellation of generation requests."""

    @pytest.mark.asyncio
    async def test_cancel_in_flight_request(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.hold()
        generation.enqueue(block_response("hero"))
        task = asyncio.create_task(orchestrator.send_message(session, "build a full page"))
        await asyncio.sleep(0)
        assert session.auto_continue

        orchestrator.cancel(session)
        assert not session.is_loading
        assert not session.auto_continue

        outcome = await task
        generation.release()
        assert outcome.status == OutcomeStatus.CANCELLED
        assert session.error is None
        assert len(session.blocks) == 0
        assert [t.content for t in session.conversation] == ["build a full page"]

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
    ) -> None:
        await orchestrator.send_message(session, "hello")
        turns = session.conversation.turns

        orchestrator.cancel(session)
        orchestrator.cancel(session)

        assert session.conversation.turns == turns
        assert session.error is None
        assert not session.is_loading
        assert not session.auto_continue

    @pytest.mark.asyncio
    async def test_cancel_keeps_previous_error(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(BackendUnavailableError("down"))
        await orchestrator.send_message(session, "hello")

        orchestrator.cancel(session)
        assert session.error == "down"


class TestAutoContinue:
    """Tests for auto-continue chaining."""

    @pytest.mark.asyncio
    async def test_full_sequence_then_stops(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(*(block_response(t) for t in FULL_SEQUENCE))
        generation.enqueue(block_response("pricing"))

        outcome = await orchestrator.send_message(session, "build a full page please")
        await orchestrator.drain(session)

        assert outcome.block is not None
        assert generation.call_count == 5
        assert [b.type for b in session.blocks] == FULL_SEQUENCE
        assert all(b.status == BlockStatus.APPROVED for b in session.blocks)
        assert not session.auto_continue
        assert session.continuation is None
        assert _prompts(generation)[1:] == [
            "Continue with the features section",
            "Continue with the testimonials section",
            "Continue with the cta section",
            "Continue with the contact section",
        ]

    @pytest.mark.asyncio
    async def test_explicit_start_from_empty_queue(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.responder = follow_continue_prompts()

        orchestrator.start_auto_continue(session)
        await orchestrator.drain(session)

        assert generation.call_count == 5
        assert [b.type for b in session.blocks] == FULL_SEQUENCE
        assert not session.auto_continue

    @pytest.mark.asyncio
    async def test_next_type_recomputed_when_continuation_fires(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.responder = follow_continue_prompts()
        generation.enqueue(block_response("hero"))

        await orchestrator.send_message(session, "build a full page")
        assert session.continuation is not None
        # Created while the continuation for "features" is still waiting
        session.blocks.append_block(
            BlockFactory.create(block_type="features", status=BlockStatus.APPROVED)
        )
        await orchestrator.drain(session)

        assert _prompts(generation)[1] == "Continue with the testimonials section"
        assert [b.type for b in session.blocks] == FULL_SEQUENCE
        assert generation.call_count == 4

    @pytest.mark.asyncio
    async def test_rejected_block_type_is_requested_again(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.responder = follow_continue_prompts()
        hero = session.blocks.append_block(
            BlockFactory.create(block_type="hero", status=BlockStatus.REJECTED)
        )

        orchestrator.start_auto_continue(session)
        await orchestrator.drain(session)

        assert _prompts(generation)[0] == "Continue with the hero section"
        assert hero.status == BlockStatus.REJECTED
        assert len(orchestrator.approved_blocks(session)) == 5

    @pytest.mark.asyncio
    async def test_failure_ends_auto_continue(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(block_response("hero"), RateLimitError("rate limited"))
        generation.responder = follow_continue_prompts()

        await orchestrator.send_message(session, "build a full page")
        await orchestrator.drain(session)

        assert generation.call_count == 2
        assert not session.auto_continue
        assert session.error == "rate limited"
        assert session.continuation is None
        assert [b.type for b in session.blocks] == ["hero"]
        assert [t.role for t in session.conversation] == [Role.USER, Role.AGENT, Role.USER]

    @pytest.mark.asyncio
    async def test_stop_invalidates_scheduled_continuation(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.responder = follow_continue_prompts()

        await orchestrator.send_message(session, "build a full page")
        assert session.continuation is not None
        orchestrator.stop_auto_continue(session)
        for _ in range(5):
            await asyncio.sleep(0)
        await orchestrator.drain(session)

        assert generation.call_count == 1
        assert not session.auto_continue

    @pytest.mark.asyncio
    async def test_cancel_invalidates_scheduled_continuation(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.responder = follow_continue_prompts()

        await orchestrator.send_message(session, "build a full page")
        orchestrator.cancel(session)
        for _ in range(5):
            await asyncio.sleep(0)

        assert generation.call_count == 1
        assert session.continuation is None
        assert session.error is None

    @pytest.mark.asyncio
    async def test_continuation_dropped_while_request_in_flight(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        """The request that was in flight picks the sequence up again."""
        generation.enqueue(block_response("hero"), GenerationResponse(message="noted"))
        generation.responder = follow_continue_prompts()

        await orchestrator.send_message(session, "build a full page")
        generation.hold()
        task = asyncio.create_task(orchestrator.send_message(session, "use blue colors"))
        for _ in range(3):
            await asyncio.sleep(0)
        generation.release()
        await task
        await orchestrator.drain(session)

        assert generation.max_in_flight == 1
        assert _prompts(generation)[:3] == [
            "build a full page",
            "use blue colors",
            "Continue with the features section",
        ]
        assert generation.call_count == 6
        assert [b.type for b in session.blocks] == FULL_SEQUENCE
        assert not session.auto_continue

    @pytest.mark.asyncio
    async def test_answer_without_block_still_continues(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(
            block_response("hero"),
            GenerationResponse(message="Which features matter most?"),
        )
        generation.responder = follow_continue_prompts()

        await orchestrator.send_message(session, "build a full page")
        await orchestrator.drain(session)

        assert _prompts(generation)[1:3] == [
            "Continue with the features section",
            "Continue with the features section",
        ]
        assert [b.type for b in session.blocks] == FULL_SEQUENCE
        assert not session.auto_continue
        assert session.continuation is None

    @pytest.mark.asyncio
    async def test_backend_that_never_creates_blocks_exhausts_budget(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(block_response("hero"))

        await orchestrator.send_message(session, "build a full page")
        await orchestrator.drain(session)

        assert generation.call_count == 1 + len(FULL_SEQUENCE)
        assert [b.type for b in session.blocks] == ["hero"]
        assert not session.auto_continue
        assert session.continuation is None

    @pytest.mark.asyncio
    async def test_recommendation_stops_auto_continue(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(
            block_response("hero"),
            GenerationResponse(
                message="Testimonials need the reviews module.",
                tool_call=ToolCall(name="activate_modules", arguments={"modules": ["reviews"]}),
            ),
        )
        generation.responder = follow_continue_prompts()

        await orchestrator.send_message(session, "build a full page")
        await orchestrator.drain(session)

        assert generation.call_count == 2
        assert session.pending_recommendation is not None
        assert not session.auto_continue
        assert session.continuation is None

    @pytest.mark.asyncio
    async def test_drain_waits_for_running_continuation(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.responder = follow_continue_prompts()
        generation.enqueue(block_response("hero"))

        await orchestrator.send_message(session, "build a full page")
        generation.hold()
        for _ in range(3):
            await asyncio.sleep(0)
        assert session.inflight is not None
        assert session.continuation is not None

        drained = asyncio.create_task(orchestrator.drain(session))
        await asyncio.sleep(0)
        assert not drained.done()
        generation.release()
        await drained

        assert generation.call_count == 5
        assert session.inflight is None
        assert session.continuation is None

    @pytest.mark.asyncio
    async def test_stop_lets_fired_continuation_finish(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.responder = follow_continue_prompts()
        generation.enqueue(block_response("hero"))

        await orchestrator.send_message(session, "build a full page")
        generation.hold()
        for _ in range(3):
            await asyncio.sleep(0)
        orchestrator.stop_auto_continue(session)
        generation.release()
        await orchestrator.drain(session)
        for _ in range(3):
            await asyncio.sleep(0)

        assert generation.call_count == 2
        assert [b.type for b in session.blocks] == ["hero", "features"]
        assert session.conversation.last.role == Role.AGENT

    @pytest.mark.asyncio
    async def test_unexpected_error_surfaces_through_drain(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(block_response("hero"), RuntimeError("backend bug"))

        await orchestrator.send_message(session, "build a full page")
        with pytest.raises(RuntimeError, match="backend bug"):
            await orchestrator.drain(session)

        assert not session.auto_continue
        assert session.continuation is None
        assert session.inflight is None

    @pytest.mark.asyncio
    async def test_misbehaving_backend_cannot_loop_forever(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        """A backend that keeps answering with the wrong type exhausts the step budget."""
        generation.responder = lambda request: block_response("gallery")
        generation.enqueue(block_response("hero"))

        await orchestrator.send_message(session, "build a full page")
        await orchestrator.drain(session)

        assert generation.call_count == 1 + len(FULL_SEQUENCE)
        assert not session.auto_continue
        assert session.continuation is None

    @pytest.mark.asyncio
    async def test_continuation_waits_for_delay(
        self,
        generation: MockGenerationBackend,
        scraping,
        capability_store: InMemoryCapabilityStore,
    ) -> None:
        orchestrator = Orchestrator(
            generation,
            scraping,
            capability_store,
            sequencer_config=SequencerConfig(auto_continue_delay_seconds=0.05),
        )
        session = orchestrator.new_session()
        generation.responder = follow_continue_prompts()

        await orchestrator.send_message(session, "build a full page")
        await asyncio.sleep(0)
        assert generation.call_count == 1

        await orchestrator.drain(session)
        assert generation.call_count == 5


class TestRegenerate:
    """Tests for block regeneration."""

    @pytest.mark.asyncio
    async def test_regenerate_with_feedback(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        generation.enqueue(block_response("hero", title="Old"), block_response("hero", title="New"))
        first = await orchestrator.send_message(session, "add a hero")
        assert first.block is not None

        outcome = await orchestrator.regenerate_block(session, first.block.id, "make it punchier")

        assert _prompts(generation)[-1] == (
            "Regenerate the hero block with this feedback: make it punchier"
        )
        assert first.block.status == BlockStatus.REJECTED
        assert outcome.block is not None
        assert outcome.block.data == {"title": "New"}
        assert orchestrator.approved_blocks(session) == [outcome.block]
        assert len(session.blocks) == 2

    @pytest.mark.asyncio
    async def test_regenerate_without_feedback(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        block = session.blocks.append_block(BlockFactory.create(block_type="cta"))

        await orchestrator.regenerate_block(session, block.id)

        assert _prompts(generation)[-1] == "Regenerate the cta block with better content"

    @pytest.mark.asyncio
    async def test_regenerate_unknown_block(
        self,
        orchestrator: Orchestrator,
        session: SessionState,
        generation: MockGenerationBackend,
    ) -> None:
        with pytest.raises(BlockNotFoundError):
            await orchestrator.regenerate_block(session, "missing")
        assert generation.call_count == 0

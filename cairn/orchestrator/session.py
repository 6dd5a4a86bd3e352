"""Per-session orchestration state."""

import asyncio
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4

from cairn.blocks.queue import BlockQueue
from cairn.conversation.log import ConversationLog
from cairn.orchestrator.cancellation import CancellationHandle
from cairn.orchestrator.models import (
    MigrationState,
    ModuleRecommendation,
    RecommendationStatus,
)


@dataclass
class SessionState:
    """Everything one orchestration session owns.

    Created empty, mutated only through Orchestrator operations and thrown
    away on reset. Holds live asyncio objects, so it is not serialisable.
    """

    session_id: UUID = field(default_factory=uuid4)
    conversation: ConversationLog = field(default_factory=ConversationLog)
    blocks: BlockQueue = field(default_factory=BlockQueue)
    recommendation: ModuleRecommendation | None = None
    recommendations: list[ModuleRecommendation] = field(default_factory=list)
    migration: MigrationState = field(default_factory=MigrationState)
    auto_continue: bool = False
    auto_continue_steps: int = 0
    error: str | None = None
    enabled_capabilities: set[str] = field(default_factory=set)

    # Runtime handles
    inflight: CancellationHandle | None = None
    continuation: "asyncio.Task[Any] | None" = None
    continuation_running: bool = False

    @property
    def is_loading(self) -> bool:
        return self.inflight is not None

    @property
    def pending_recommendation(self) -> ModuleRecommendation | None:
        rec = self.recommendation
        if rec is not None and rec.status == RecommendationStatus.PENDING:
            return rec
        return None

    def clear(self) -> None:
        """Drop all conversation, block, gate and migration state.

        Callers cancel the in-flight request and any continuation first.
        """
        self.session_id = uuid4()
        self.conversation = ConversationLog()
        self.blocks = BlockQueue()
        self.recommendation = None
        self.recommendations = []
        self.migration = MigrationState()
        self.auto_continue = False
        self.auto_continue_steps = 0
        self.error = None
        self.enabled_capabilities = set()
        self.inflight = None
        self.continuation = None
        self.continuation_running = False

"""Module Recommendation Gate.

A recommendation pauses the conversation until the operator accepts or
rejects it. Only one can be pending at a time; a second one raised while
the first is undecided is dropped.
"""

from typing import TYPE_CHECKING

from cairn.config.models import GateConfig
from cairn.errors import RecommendationStateError
from cairn.observability.logging import get_logger
from cairn.observability.metrics import RECOMMENDATIONS
from cairn.orchestrator.cancellation import ensure_idle
from cairn.orchestrator.models import (
    ModuleRecommendation,
    RecommendationStatus,
    RequestOutcome,
)
from cairn.orchestrator.session import SessionState

if TYPE_CHECKING:
    from cairn.orchestrator.capabilities import CapabilityPlanner
    from cairn.orchestrator.sequencer import GenerationSequencer

logger = get_logger(__name__)


def open_recommendation(
    state: SessionState,
    modules: list[str],
    reason: str = "",
) -> ModuleRecommendation | None:
    """Record a new pending recommendation.

    Returns:
        The recommendation, or None if another one is still pending
    """
    pending = state.pending_recommendation
    if pending is not None:
        RECOMMENDATIONS.labels(status="dropped").inc()
        logger.warning(
            "recommendation_dropped",
            session_id=str(state.session_id),
            pending_id=str(pending.id),
            modules=modules,
        )
        return None

    recommendation = ModuleRecommendation(modules=list(modules), reason=reason)
    state.recommendation = recommendation
    state.recommendations.append(recommendation)
    RECOMMENDATIONS.labels(status="pending").inc()
    logger.info(
        "recommendation_opened",
        session_id=str(state.session_id),
        recommendation_id=str(recommendation.id),
        modules=recommendation.modules,
    )
    return recommendation


class ModuleGate:
    """Accept/reject handling for module recommendations."""

    def __init__(
        self,
        sequencer: "GenerationSequencer",
        planner: "CapabilityPlanner",
        config: GateConfig | None = None,
    ) -> None:
        self._sequencer = sequencer
        self._planner = planner
        self._config = config or GateConfig()

    async def accept(self, state: SessionState) -> RequestOutcome:
        """Accept the pending recommendation and resume the conversation.

        The capabilities are enabled inside the follow-up request, so exactly
        one generation request is issued. A store failure is reported as the
        session error and does not undo the acceptance.

        Raises:
            RecommendationStateError: If nothing is pending
            ReentrantRequestError: If a request is already in flight
        """
        recommendation = self._pending(state)
        ensure_idle(state)

        recommendation.status = RecommendationStatus.ACCEPTED
        RECOMMENDATIONS.labels(status="accepted").inc()
        logger.info(
            "recommendation_accepted",
            session_id=str(state.session_id),
            recommendation_id=str(recommendation.id),
            modules=recommendation.modules,
        )

        async def enable_modules() -> None:
            await self._planner.enable(state, recommendation.modules, trigger="recommendation")

        return await self._sequencer.request_generation(
            state, self._config.resume_prompt, before_dispatch=enable_modules
        )

    def reject(self, state: SessionState) -> ModuleRecommendation:
        """Reject the pending recommendation. No request is issued.

        Raises:
            RecommendationStateError: If nothing is pending
        """
        recommendation = self._pending(state)
        recommendation.status = RecommendationStatus.REJECTED
        RECOMMENDATIONS.labels(status="rejected").inc()
        logger.info(
            "recommendation_rejected",
            session_id=str(state.session_id),
            recommendation_id=str(recommendation.id),
        )
        return recommendation

    def _pending(self, state: SessionState) -> ModuleRecommendation:
        recommendation = state.pending_recommendation
        if recommendation is None:
            raise RecommendationStateError("No module recommendation is pending")
        return recommendation

"""Guided content orchestration: generation sequencing, the module
recommendation gate and the site migration state machine."""

from cairn.orchestrator.cancellation import CancellationHandle, RequestKind
from cairn.orchestrator.capabilities import CapabilityPlanner
from cairn.orchestrator.facade import Orchestrator
from cairn.orchestrator.gate import ModuleGate, open_recommendation
from cairn.orchestrator.migration import MigrationStateMachine, normalize_url
from cairn.orchestrator.models import (
    DiscoveryStatus,
    MigrationPhase,
    MigrationState,
    ModuleRecommendation,
    OutcomeStatus,
    RecommendationStatus,
    RequestOutcome,
)
from cairn.orchestrator.sequencer import GenerationSequencer
from cairn.orchestrator.session import SessionState
from cairn.orchestrator.shortcuts import Shortcut, ShortcutKind, match_shortcut
from cairn.orchestrator.tool_calls import (
    ActivateModules,
    CreateBlock,
    Unrecognized,
    decode_tool_call,
)

__all__ = [
    "ActivateModules",
    "CancellationHandle",
    "CapabilityPlanner",
    "CreateBlock",
    "DiscoveryStatus",
    "GenerationSequencer",
    "MigrationPhase",
    "MigrationState",
    "MigrationStateMachine",
    "ModuleGate",
    "ModuleRecommendation",
    "Orchestrator",
    "OutcomeStatus",
    "RecommendationStatus",
    "RequestKind",
    "RequestOutcome",
    "SessionState",
    "Shortcut",
    "ShortcutKind",
    "Unrecognized",
    "decode_tool_call",
    "match_shortcut",
    "normalize_url",
    "open_recommendation",
]

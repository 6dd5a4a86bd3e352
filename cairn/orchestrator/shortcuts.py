"""Conversational shortcuts.

A few user messages are handled locally instead of going to the generation
backend: approval and skip words while a migrated block is under review,
phase-skip phrases during a migration, and "migrate/import/clone <url>".
"""

import re
from dataclasses import dataclass
from enum import Enum

from cairn.orchestrator.models import MigrationPhase, MigrationState

APPROVE_WORDS: frozenset[str] = frozenset({
    "yes",
    "ok",
    "okay",
    "approve",
    "looks good",
    "keep it",
    "perfect",
    "great",
})
SKIP_WORDS: frozenset[str] = frozenset({"skip", "next", "pass", "no"})
PHASE_SKIP_PHRASES: tuple[str, ...] = ("skip blog", "skip kb", "just pages", "only pages")
MIGRATE_VERBS: tuple[str, ...] = ("migrate", "import", "clone")

_URL = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)


class ShortcutKind(str, Enum):
    APPROVE = "approve"
    SKIP = "skip"
    SKIP_PHASE = "skip_phase"
    MIGRATE = "migrate"


@dataclass(frozen=True)
class Shortcut:
    kind: ShortcutKind
    url: str | None = None


def match_shortcut(text: str, migration: MigrationState) -> Shortcut | None:
    """Return the shortcut `text` triggers in the current migration state."""
    lowered = text.strip().lower().rstrip("!.")

    reviewing = migration.is_active and migration.current_block is not None
    if reviewing and lowered in APPROVE_WORDS:
        return Shortcut(ShortcutKind.APPROVE)
    if reviewing and lowered in SKIP_WORDS:
        return Shortcut(ShortcutKind.SKIP)

    if migration.is_active and any(phrase in lowered for phrase in PHASE_SKIP_PHRASES):
        return Shortcut(ShortcutKind.SKIP_PHASE)

    if migration.phase != MigrationPhase.COMPLETE:
        match = _URL.search(text)
        if match and any(verb in lowered for verb in MIGRATE_VERBS):
            return Shortcut(ShortcutKind.MIGRATE, url=match.group(0).rstrip(".,;:)!?"))
    return None

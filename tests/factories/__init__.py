"""Test factories for creating test data."""

from tests.factories.orchestration import (
    BlockFactory,
    ScrapeResultFactory,
    SiteStructureFactory,
    follow_continue_prompts,
)

__all__ = [
    "BlockFactory",
    "ScrapeResultFactory",
    "SiteStructureFactory",
    "follow_continue_prompts",
]

"""Generation sequencing and module gate configuration models."""

from pydantic import BaseModel, Field, field_validator

DEFAULT_SEQUENCE = ["hero", "features", "testimonials", "cta", "contact"]

DEFAULT_FULL_PAGE_PHRASES = [
    "full page",
    "full landing page",
    "complete page",
    "complete landing page",
    "whole page",
    "entire page",
    "full website",
    "complete website",
]


class SequencerConfig(BaseModel):
    """Generation Request Sequencer configuration."""

    auto_continue_sequence: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SEQUENCE),
        description="Block types auto-continue walks through, in order",
    )
    auto_continue_delay_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Delay before a scheduled continuation fires",
    )
    continue_prompt_template: str = Field(
        default="Continue with the {block_type} section",
        description="Prompt issued for each continuation",
    )
    full_page_phrases: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FULL_PAGE_PHRASES),
        description="Phrases in a user message that switch auto-continue on",
    )
    regenerate_prompt_template: str = Field(
        default="Regenerate the {block_type} block with this feedback: {feedback}",
        description="Prompt used when regenerating a block with feedback",
    )
    regenerate_default_prompt_template: str = Field(
        default="Regenerate the {block_type} block with better content",
        description="Prompt used when regenerating a block without feedback",
    )

    @field_validator("auto_continue_sequence")
    @classmethod
    def _unique_sequence(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            raise ValueError("auto_continue_sequence must not repeat block types")
        return value


class GateConfig(BaseModel):
    """Module Recommendation Gate configuration."""

    resume_prompt: str = Field(
        default="The modules are activated. Let's create the first section.",
        description="Prompt sent to resume the conversation after acceptance",
    )

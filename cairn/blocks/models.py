"""Content block models and the block type vocabulary."""

from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

BLOCK_TYPES: frozenset[str] = frozenset({
    "accordion",
    "announcement-bar",
    "article-grid",
    "badge",
    "booking",
    "cart",
    "chat",
    "chat-launcher",
    "comparison",
    "contact",
    "countdown",
    "cta",
    "embed",
    "features",
    "floating-cta",
    "form",
    "gallery",
    "header",
    "hero",
    "image",
    "info-box",
    "kb-accordion",
    "kb-featured",
    "kb-hub",
    "kb-search",
    "link-grid",
    "logos",
    "lottie",
    "map",
    "marquee",
    "newsletter",
    "notification-toast",
    "pricing",
    "products",
    "progress",
    "quote",
    "separator",
    "smart-booking",
    "social-proof",
    "stats",
    "table",
    "tabs",
    "team",
    "testimonials",
    "text",
    "timeline",
    "two-column",
    "video-hero",
    "webinar",
    "youtube",
})


def normalize_block_type(raw: str) -> str | None:
    """Map a raw type name onto the vocabulary.

    Tool names spell multi-word types with underscores (create_two_column_block),
    the vocabulary uses hyphens.

    Returns:
        The vocabulary entry, or None if the type is unknown
    """
    candidate = raw.strip().lower().replace("_", "-")
    return candidate if candidate in BLOCK_TYPES else None


class BlockStatus(str, Enum):
    """Review lifecycle of a block."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BlockOrigin(str, Enum):
    """Which flow produced a block."""

    CHAT = "chat"
    MIGRATION = "migration"


def new_block_id() -> str:
    return uuid4().hex


class Block(BaseModel):
    """A typed unit of generated content with an approval status."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: str = Field(default_factory=new_block_id, description="Unique identifier")
    type: str = Field(..., description="Entry of the block type vocabulary")
    data: dict[str, Any] = Field(default_factory=dict, description="Opaque block content")
    status: BlockStatus = Field(default=BlockStatus.PENDING, description="Review status")
    origin: BlockOrigin = Field(default=BlockOrigin.CHAT, description="Producing flow")
    source_url: str | None = Field(default=None, description="Page a migrated block came from")

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        normalized = normalize_block_type(value)
        if normalized is None:
            raise ValueError(f"Unknown block type: {value}")
        return normalized

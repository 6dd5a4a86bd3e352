"""Conversation domain models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Role(str, Enum):
    """Who produced a turn."""

    USER = "user"
    AGENT = "agent"


class ToolCall(BaseModel):
    """Structured directive returned by the generation backend."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Tool name, e.g. create_hero_block")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class ConversationTurn(BaseModel):
    """A single user or agent turn. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    role: Role = Field(..., description="Speaker")
    content: str = Field(..., description="Text content")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    tool_call: ToolCall | None = Field(default=None, description="Attached tool call")

    @classmethod
    def user(cls, content: str) -> "ConversationTurn":
        return cls(role=Role.USER, content=content)

    @classmethod
    def agent(cls, content: str, tool_call: ToolCall | None = None) -> "ConversationTurn":
        return cls(role=Role.AGENT, content=content, tool_call=tool_call)

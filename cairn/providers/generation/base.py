"""Generation backend contract.

The backend turns the conversation so far into an agent message and, at
most, one tool call.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from cairn.conversation.models import ConversationTurn, ToolCall


class MigrationContext(BaseModel):
    """Migration details passed along while a migration is active."""

    source_url: str | None = Field(default=None, description="Page being migrated")
    platform: str | None = Field(default=None, description="Detected source platform")


class GenerationRequest(BaseModel):
    """Input to a generation call."""

    conversation_history: list[ConversationTurn] = Field(
        default_factory=list, description="Full transcript, oldest first"
    )
    current_capabilities: list[str] = Field(
        default_factory=list, description="Capability ids currently enabled"
    )
    migration_context: MigrationContext | None = Field(
        default=None, description="Set while a migration is active"
    )


class GenerationResponse(BaseModel):
    """Output of a generation call."""

    message: str = Field(default="", description="Agent message text")
    tool_call: ToolCall | None = Field(default=None, description="Optional tool call")


class GenerationBackend(ABC):
    """Abstract generation backend."""

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Run one generation call.

        Raises:
            ProviderError: On any backend failure
        """

"""Conversation log: ordered user/agent turns with optional tool calls."""

from cairn.conversation.log import ConversationLog
from cairn.conversation.models import ConversationTurn, Role, ToolCall

__all__ = ["ConversationLog", "ConversationTurn", "Role", "ToolCall"]

"""Decoding of generation tool calls into orchestrator directives."""

import re
from dataclasses import dataclass, field
from typing import Any

from cairn.blocks.models import normalize_block_type
from cairn.conversation.models import ToolCall
from cairn.observability.logging import get_logger

logger = get_logger(__name__)

ACTIVATE_MODULES = "activate_modules"
_CREATE_BLOCK = re.compile(r"^create_(\w+)_block$")


@dataclass(frozen=True)
class ActivateModules:
    """Agent asks for capabilities to be enabled."""

    modules: list[str]
    reason: str = ""


@dataclass(frozen=True)
class CreateBlock:
    """Agent produced a content block."""

    block_type: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Unrecognized:
    """Tool call the orchestrator has no handler for."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


Directive = ActivateModules | CreateBlock | Unrecognized


def decode_tool_call(tool_call: ToolCall) -> Directive:
    """Map a tool call to a directive.

    `create_<type>_block` names resolve to CreateBlock when <type> is a known
    block type (underscores and hyphens are interchangeable). Anything else
    becomes Unrecognized, which callers log and otherwise ignore.
    """
    arguments = dict(tool_call.arguments)

    if tool_call.name == ACTIVATE_MODULES:
        modules = arguments.get("modules") or []
        if isinstance(modules, str):
            modules = [modules]
        if not isinstance(modules, list) or not all(isinstance(m, str) for m in modules):
            logger.warning("activate_modules_malformed", arguments=arguments)
            return Unrecognized(name=tool_call.name, arguments=arguments)
        return ActivateModules(modules=list(modules), reason=str(arguments.get("reason", "")))

    match = _CREATE_BLOCK.match(tool_call.name)
    if match:
        block_type = normalize_block_type(match.group(1))
        if block_type is not None:
            return CreateBlock(block_type=block_type, data=arguments)
        logger.warning("unknown_block_type", tool_name=tool_call.name)

    return Unrecognized(name=tool_call.name, arguments=arguments)

"""Generation backend contract and implementations."""

from cairn.providers.generation.base import (
    GenerationBackend,
    GenerationRequest,
    GenerationResponse,
    MigrationContext,
)
from cairn.providers.generation.http import HttpGenerationBackend
from cairn.providers.generation.mock import MockGenerationBackend, block_response

__all__ = [
    "GenerationBackend",
    "GenerationRequest",
    "GenerationResponse",
    "HttpGenerationBackend",
    "MigrationContext",
    "MockGenerationBackend",
    "block_response",
]

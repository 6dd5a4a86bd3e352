"""Block queue: generated content units and their review status."""

from cairn.blocks.models import (
    BLOCK_TYPES,
    Block,
    BlockOrigin,
    BlockStatus,
    normalize_block_type,
)
from cairn.blocks.queue import BlockQueue

__all__ = [
    "BLOCK_TYPES",
    "Block",
    "BlockOrigin",
    "BlockQueue",
    "BlockStatus",
    "normalize_block_type",
]

"""Append-only block queue."""

from collections.abc import Iterator

from cairn.blocks.models import Block, BlockStatus
from cairn.errors import BlockNotFoundError, DuplicateIdentityError


class BlockQueue:
    """Ordered sequence of blocks in the order they were produced.

    Blocks are never removed. Rejected blocks stay for audit and are
    filtered out of approved_blocks(), which is what downstream page
    assembly consumes.
    """

    def __init__(self) -> None:
        self._blocks: list[Block] = []
        self._index: dict[str, Block] = {}

    def append_block(self, block: Block) -> Block:
        """Append a block.

        Raises:
            DuplicateIdentityError: If a block with the same id exists
        """
        if block.id in self._index:
            raise DuplicateIdentityError(f"Block already queued: {block.id}")
        self._blocks.append(block)
        self._index[block.id] = block
        return block

    def get(self, block_id: str) -> Block | None:
        return self._index.get(block_id)

    def set_block_status(self, block_id: str, status: BlockStatus) -> Block:
        """Set a block's status.

        Raises:
            BlockNotFoundError: If the id is unknown
        """
        block = self._index.get(block_id)
        if block is None:
            raise BlockNotFoundError(block_id)
        block.status = status
        return block

    def approved_blocks(self) -> list[Block]:
        """Approved blocks in insertion order."""
        return [b for b in self._blocks if b.status == BlockStatus.APPROVED]

    def has_type(self, block_type: str) -> bool:
        """Whether a non-rejected block of this type exists."""
        return any(
            b.type == block_type and b.status != BlockStatus.REJECTED for b in self._blocks
        )

    @property
    def blocks(self) -> tuple[Block, ...]:
        return tuple(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(tuple(self._blocks))

    def __len__(self) -> int:
        return len(self._blocks)

"""Append-only conversation transcript."""

from collections.abc import Iterator
from uuid import UUID

from cairn.conversation.models import ConversationTurn
from cairn.errors import DuplicateIdentityError


class ConversationLog:
    """Ordered, append-only sequence of turns.

    Insertion order is the transcript order sent back to the generation
    backend on every call.
    """

    def __init__(self) -> None:
        self._turns: list[ConversationTurn] = []
        self._ids: set[UUID] = set()

    def append(self, turn: ConversationTurn) -> ConversationTurn:
        """Append a turn.

        Raises:
            DuplicateIdentityError: If a turn with the same id exists
        """
        if turn.id in self._ids:
            raise DuplicateIdentityError(f"Turn already in log: {turn.id}")
        self._ids.add(turn.id)
        self._turns.append(turn)
        return turn

    @property
    def turns(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    @property
    def last(self) -> ConversationTurn | None:
        return self._turns[-1] if self._turns else None

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(tuple(self._turns))

    def __len__(self) -> int:
        return len(self._turns)

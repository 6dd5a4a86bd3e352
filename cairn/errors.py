"""Orchestrator error hierarchy.

Request operations never raise for backend failures or cancellation; those
are reported through RequestOutcome and the session's current error. The
exceptions below are raised synchronously, before any state changes, when
an operation is not allowed in the current state.
"""


class OrchestratorError(Exception):
    """Base exception for all orchestrator errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ReentrantRequestError(OrchestratorError):
    """Raised when a backend call is started while another is in flight."""

    def __init__(self, in_flight: str) -> None:
        super().__init__(f"A {in_flight} request is already in flight")
        self.in_flight = in_flight


class DuplicateURLError(OrchestratorError):
    """Raised when a page that was already migrated is requested again."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Page already migrated: {url}")
        self.url = url


class MigrationStateError(OrchestratorError):
    """Raised when a migration operation doesn't apply to the current state."""


class RecommendationStateError(OrchestratorError):
    """Raised when accepting or rejecting without a pending recommendation."""


class BlockNotFoundError(OrchestratorError):
    """Raised when a block id is not in the block queue."""

    def __init__(self, block_id: str) -> None:
        super().__init__(f"Block not found: {block_id}")
        self.block_id = block_id


class DuplicateIdentityError(ValueError):
    """Raised when appending a turn or block whose id is already present."""

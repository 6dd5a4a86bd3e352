"""External collaborators: generation backend, scraping backend, capability store.

Each collaborator has an abstract contract plus an in-memory/mock
implementation for tests and development and, for the two backends, an
httpx client.
"""

from cairn.providers.errors import (
    BackendUnavailableError,
    CapabilityStoreError,
    InvalidResponseError,
    ProviderError,
    RateLimitError,
)

__all__ = [
    "BackendUnavailableError",
    "CapabilityStoreError",
    "InvalidResponseError",
    "ProviderError",
    "RateLimitError",
]

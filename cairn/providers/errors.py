"""Collaborator error hierarchy.

Backend adapters wrap transport- and payload-specific failures in one of
these so the orchestrator handles every backend the same way.
"""


class ProviderError(Exception):
    """Base exception for collaborator failures."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class BackendUnavailableError(ProviderError):
    """Transport failure or server-side error."""


class RateLimitError(ProviderError):
    """Backend refused the request because of rate limiting."""


class InvalidResponseError(ProviderError):
    """Backend answered with a payload that doesn't match the contract."""


class CapabilityStoreError(ProviderError):
    """Enabling capabilities failed."""

"""Capability store contract."""

from abc import ABC, abstractmethod


class CapabilityStore(ABC):
    """Platform capabilities (modules) that can be switched on."""

    @abstractmethod
    async def enable(self, capability_ids: list[str]) -> None:
        """Enable the given capabilities.

        Raises:
            CapabilityStoreError: If the store rejects the change
        """

    @abstractmethod
    async def enabled(self) -> list[str]:
        """Capability ids currently enabled, sorted."""

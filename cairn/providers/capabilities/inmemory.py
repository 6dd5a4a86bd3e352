"""In-memory capability store."""

from cairn.providers.capabilities.base import CapabilityStore
from cairn.providers.errors import CapabilityStoreError


class InMemoryCapabilityStore(CapabilityStore):
    """Capability store backed by a set, for tests and development.

    Ids outside `known`, when given, are refused like a real store would.
    """

    def __init__(
        self,
        enabled: list[str] | None = None,
        known: list[str] | None = None,
    ) -> None:
        self._enabled: set[str] = set(enabled or [])
        self._known = set(known) if known is not None else None
        self.enable_calls: list[list[str]] = []

    async def enable(self, capability_ids: list[str]) -> None:
        self.enable_calls.append(list(capability_ids))
        if self._known is not None:
            unknown = sorted(set(capability_ids) - self._known)
            if unknown:
                raise CapabilityStoreError(f"Unknown capabilities: {', '.join(unknown)}")
        self._enabled.update(capability_ids)

    async def enabled(self) -> list[str]:
        return sorted(self._enabled)

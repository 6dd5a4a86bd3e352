"""Capability store contract and in-memory implementation."""

from cairn.providers.capabilities.base import CapabilityStore
from cairn.providers.capabilities.inmemory import InMemoryCapabilityStore

__all__ = ["CapabilityStore", "InMemoryCapabilityStore"]

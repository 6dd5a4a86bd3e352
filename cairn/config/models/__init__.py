"""Configuration model exports.

    from cairn.config.models import SequencerConfig, MigrationConfig
"""

from cairn.config.models.backends import BackendsConfig
from cairn.config.models.migration import CapabilitiesConfig, MigrationConfig
from cairn.config.models.observability import LoggingConfig, ObservabilityConfig
from cairn.config.models.sequencer import GateConfig, SequencerConfig

__all__ = [
    "BackendsConfig",
    "CapabilitiesConfig",
    "GateConfig",
    "LoggingConfig",
    "MigrationConfig",
    "ObservabilityConfig",
    "SequencerConfig",
]

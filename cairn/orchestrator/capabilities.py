"""Automatic capability enabling for approved blocks and detected platforms."""

from cairn.config.models import CapabilitiesConfig, MigrationConfig
from cairn.observability.logging import get_logger
from cairn.orchestrator.session import SessionState
from cairn.providers.capabilities import CapabilityStore
from cairn.providers.errors import CapabilityStoreError

logger = get_logger(__name__)

UNKNOWN_PLATFORM = "unknown"


class CapabilityPlanner:
    """Works out which capabilities a block or platform needs and enables them.

    Each capability is requested at most once per session. Store failures are
    recorded as the session error and otherwise ignored; they never undo the
    review or gate decision that triggered them.
    """

    def __init__(
        self,
        store: CapabilityStore,
        capabilities_config: CapabilitiesConfig | None = None,
        migration_config: MigrationConfig | None = None,
    ) -> None:
        self._store = store
        self._config = capabilities_config or CapabilitiesConfig()
        self._migration_config = migration_config or MigrationConfig()

    @property
    def store(self) -> CapabilityStore:
        return self._store

    def module_for_block(self, block_type: str) -> str | None:
        return self._config.block_modules.get(block_type)

    def modules_for_platform(self, platform: str | None) -> list[str]:
        if not platform or platform.lower() == UNKNOWN_PLATFORM:
            return []
        mapped = self._migration_config.platform_modules.get(platform.lower())
        if mapped is not None:
            return list(mapped)
        return list(self._migration_config.default_platform_modules)

    async def enable_for_block(self, state: SessionState, block_type: str) -> list[str]:
        """Enable the capability an approved block depends on."""
        if not self._config.auto_enable:
            return []
        module = self.module_for_block(block_type)
        if module is None:
            return []
        return await self.enable(state, [module], trigger=f"block:{block_type}")

    async def enable_for_platform(self, state: SessionState, platform: str | None) -> list[str]:
        """Enable the capabilities suggested for a detected platform."""
        if not self._migration_config.suggest_platform_modules:
            return []
        modules = self.modules_for_platform(platform)
        if not modules:
            return []
        return await self.enable(state, modules, trigger=f"platform:{platform}")

    async def enable(
        self,
        state: SessionState,
        modules: list[str],
        trigger: str = "explicit",
    ) -> list[str]:
        """Enable capabilities not yet enabled in this session.

        Returns:
            The ids newly enabled, empty if none or if the store refused
        """
        new = [m for m in dict.fromkeys(modules) if m not in state.enabled_capabilities]
        if not new:
            return []
        try:
            await self._store.enable(new)
        except CapabilityStoreError as e:
            logger.warning(
                "capability_enable_failed",
                session_id=str(state.session_id),
                modules=new,
                trigger=trigger,
                error=str(e),
            )
            state.error = f"Could not enable modules {', '.join(new)}: {e.message}"
            return []
        state.enabled_capabilities.update(new)
        logger.info(
            "capabilities_enabled",
            session_id=str(state.session_id),
            modules=new,
            trigger=trigger,
        )
        return new

"""Root settings model for Cairn configuration."""

from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cairn.config.models import (
    BackendsConfig,
    CapabilitiesConfig,
    GateConfig,
    MigrationConfig,
    ObservabilityConfig,
    SequencerConfig,
)

# TOML config handed to the settings source by get_settings()
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration to be used by Settings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the merged TOML files."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return _toml_config.copy()


class Settings(BaseSettings):
    """Root configuration object.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{CAIRN_ENV}.toml (environment overrides)
    4. CAIRN_* environment variables (runtime overrides)
    """

    model_config = SettingsConfigDict(
        env_prefix="CAIRN_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="cairn", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")

    sequencer: SequencerConfig = Field(
        default_factory=SequencerConfig,
        description="Generation sequencing and auto-continue",
    )
    gate: GateConfig = Field(
        default_factory=GateConfig,
        description="Module recommendation gate",
    )
    migration: MigrationConfig = Field(
        default_factory=MigrationConfig,
        description="Site migration",
    )
    capabilities: CapabilitiesConfig = Field(
        default_factory=CapabilitiesConfig,
        description="Capability auto-enable",
    )
    backends: BackendsConfig = Field(
        default_factory=BackendsConfig,
        description="Generation and scraping endpoints",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Logging configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority order: constructor args, CAIRN_* env vars, TOML, defaults."""
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

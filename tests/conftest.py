"""Shared test fixtures for the Cairn test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog

from cairn.config.models import (
    CapabilitiesConfig,
    GateConfig,
    MigrationConfig,
    SequencerConfig,
)
from cairn.orchestrator import Orchestrator, SessionState
from cairn.providers.capabilities import InMemoryCapabilityStore
from cairn.providers.generation import MockGenerationBackend
from cairn.providers.scraping import MockScrapingBackend


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            toml_file = test_config_dir / filename
            toml_file.write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            original = self.original_env[key]
            if original is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = original


@pytest.fixture
def env_override() -> Generator[Callable[[dict[str, str]], EnvOverrideContext], None, None]:
    """Context manager for temporarily setting environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"CAIRN_DEBUG": "true"}):
                # test code here
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    yield _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test.

    This ensures test isolation for configuration tests.
    """
    from cairn.config import get_settings
    from cairn.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo setup_logging() so cached loggers never outlive a test."""
    yield
    structlog.reset_defaults()


# Orchestrator collaborators


@pytest.fixture
def generation() -> MockGenerationBackend:
    return MockGenerationBackend()


@pytest.fixture
def scraping() -> MockScrapingBackend:
    return MockScrapingBackend()


@pytest.fixture
def capability_store() -> InMemoryCapabilityStore:
    return InMemoryCapabilityStore()


@pytest.fixture
def sequencer_config() -> SequencerConfig:
    """Sequencer config with continuations firing on the next loop turn."""
    return SequencerConfig(auto_continue_delay_seconds=0.0)


@pytest.fixture
def orchestrator(
    generation: MockGenerationBackend,
    scraping: MockScrapingBackend,
    capability_store: InMemoryCapabilityStore,
    sequencer_config: SequencerConfig,
) -> Orchestrator:
    return Orchestrator(
        generation,
        scraping,
        capability_store,
        sequencer_config=sequencer_config,
        gate_config=GateConfig(),
        migration_config=MigrationConfig(),
        capabilities_config=CapabilitiesConfig(),
    )


@pytest.fixture
def session(orchestrator: Orchestrator) -> SessionState:
    return orchestrator.new_session()

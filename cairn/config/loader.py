"""Layered TOML configuration.

`config/default.toml` is always read; `config/{CAIRN_ENV}.toml` is merged
over it when present. Environment variables are applied later, by Settings.
"""

import os
import re
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "CAIRN_CONFIG_DIR"
ENVIRONMENT_VAR = "CAIRN_ENV"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_FILE = "default.toml"

_ENVIRONMENT_NAME = re.compile(r"^[A-Za-z0-9_-]+$")


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    CAIRN_CONFIG_DIR wins when set. Otherwise the first 'config/' with a
    default.toml, walking up from the working directory.
    """
    override = os.environ.get(CONFIG_DIR_VAR)
    if override:
        path = Path(override).expanduser()
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        candidate = directory / "config"
        if (candidate / DEFAULT_FILE).is_file():
            return candidate
    return cwd / "config"


def get_environment() -> str:
    """Environment name from CAIRN_ENV, 'development' when unset."""
    environment = os.environ.get(ENVIRONMENT_VAR, "").strip() or DEFAULT_ENVIRONMENT
    if not _ENVIRONMENT_NAME.match(environment):
        raise ValueError(f"Invalid {ENVIRONMENT_VAR}: {environment!r}")
    return environment


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {file_path}") from None


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge `override` into a copy of `base`, recursing into tables."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def config_layers(config_dir: Path, environment: str) -> list[Path]:
    """Files to merge, lowest precedence first."""
    layers = [config_dir / DEFAULT_FILE]
    env_path = config_dir / f"{environment}.toml"
    if env_path.is_file():
        layers.append(env_path)
    return layers


def load_config() -> dict[str, Any]:
    """Read and merge the TOML layers for the current environment."""
    config_dir = get_config_dir()
    default_path = config_dir / DEFAULT_FILE
    if not default_path.is_file():
        raise FileNotFoundError(
            f"Missing {default_path}. Create config/{DEFAULT_FILE} or set {CONFIG_DIR_VAR}."
        )

    config: dict[str, Any] = {}
    for path in config_layers(config_dir, get_environment()):
        config = deep_merge(config, load_toml(path))
    return config

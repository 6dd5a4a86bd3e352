"""Configuration for Cairn.

    from cairn.config import get_settings

    delay = get_settings().sequencer.auto_continue_delay_seconds

Components take their config section as a constructor argument; only the
application entry point should call get_settings().
"""

from functools import lru_cache

from cairn.config.loader import load_config
from cairn.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings from TOML layers and CAIRN_* variables, built once per process."""
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Drop the cached settings and build them again."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["Settings", "get_settings", "reload_settings"]

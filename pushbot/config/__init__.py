"""Configuration for pushbot.

Settings come from model defaults, ``config/*.toml`` and ``PUSHBOT_*``
environment variables, in increasing priority.

Usage:
    from pushbot.config import get_settings

    ttl = get_settings().scopes.ttl_seconds
"""

from functools import lru_cache

from pushbot.config.loader import load_config
from pushbot.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Re-read the settings files and environment."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]

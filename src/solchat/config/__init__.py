"""Configuration for solchat."""

from solchat.config.settings import (
    Settings,
    create_default_config,
    get_settings,
    reset_settings_cache,
)

__all__ = ["Settings", "create_default_config", "get_settings", "reset_settings_cache"]

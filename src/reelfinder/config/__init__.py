"""ReelFinder Configuration Module

- Settings: Main configuration facade
- Loader functions: get_config, load_settings, reload_config
- Domain models: API, Cache and Logging settings
"""

from __future__ import annotations

from .loader import SettingsLoader, get_config, load_env_file, load_settings, reload_config
from .models import APISettings, CacheSettings, LoggingSettings, Settings, TMDBSettings

__all__ = [
    "APISettings",
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "SettingsLoader",
    "TMDBSettings",
    "get_config",
    "load_env_file",
    "load_settings",
    "reload_config",
]

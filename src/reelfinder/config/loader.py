"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Thread-safe caching of the Settings instance
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from dotenv import load_dotenv

from reelfinder.config.models import Settings
from reelfinder.shared.constants import Application, TMDBConfig
from reelfinder.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Build a Settings instance.

    The TOML file is read when it exists; otherwise settings come from
    ``REELFINDER_*`` environment variables. When no API key is configured,
    ``TMDB_API_KEY`` is used.

    Args:
        config_path: TOML file path (default: config/config.toml)

    Returns:
        The loaded Settings

    Raises:
        ApplicationError: If the configuration file cannot be parsed
    """
    path = Path(config_path or Application.DEFAULT_CONFIG_PATH)

    try:
        settings = Settings.from_toml_file(path) if path.exists() else Settings()
    except Exception as e:
        raise ApplicationError(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=f"Failed to load configuration: {e}",
            context=ErrorContext(
                operation="load_settings",
                additional_data={"config_path": str(path)},
            ),
            original_error=e,
        ) from e

    if not settings.api.tmdb.api_key:
        env_key = os.environ.get(TMDBConfig.API_KEY_ENV, "").strip()
        if env_key:
            settings.api.tmdb.api_key = env_key

    logger.debug("Loaded settings: %r", settings.api.tmdb)
    return settings


def load_env_file(env_file: Path | str = Application.DEFAULT_ENV_FILE) -> bool:
    """Load environment variables from a .env file if present.

    A missing file is not an error: the API key can also be supplied
    later through ``MetadataClient.set_credential``.

    Returns:
        True if a file was loaded
    """
    env_path = Path(env_file)
    if not env_path.exists():
        return False
    load_dotenv(env_path, override=False)
    logger.debug("Loaded environment from %s", env_path)
    return True


class SettingsLoader:
    """Thread-safe cache of the Settings instance.

    Uses double-checked locking to keep reads lock-free once loaded.
    """

    def __init__(self, config_path: Path | str | None = None) -> None:
        self._config_path = config_path
        self._instance: Settings | None = None
        self._lock = threading.RLock()

    def get_config(self) -> Settings:
        """Return the cached settings, loading them on first use."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    load_env_file()
                    self._instance = load_settings(self._config_path)
        return self._instance

    def reload_config(self) -> Settings:
        """Reload settings from the environment and configuration file."""
        with self._lock:
            load_env_file()
            self._instance = load_settings(self._config_path)
        return self._instance


_loader = SettingsLoader()


def get_config() -> Settings:
    """Return the process settings."""
    return _loader.get_config()


def reload_config() -> Settings:
    """Reload the process settings."""
    return _loader.reload_config()


__all__ = [
    "SettingsLoader",
    "get_config",
    "load_env_file",
    "load_settings",
    "reload_config",
]

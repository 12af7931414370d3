"""Configuration models.

Domain models for the TMDB API, the search cache and logging, and the
``Settings`` facade that consolidates them.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from reelfinder.shared.constants import Application, Cache, Logging, TMDBConfig, Timeout


class TMDBSettings(BaseModel):
    """TMDB API configuration.

    Security: api_key is masked in __repr__ to prevent accidental
    exposure in logs.
    """

    api_key: str = Field(
        default="",
        repr=False,
        description="TMDB API key (required for metadata requests)",
    )
    base_url: str = Field(default=TMDBConfig.BASE_URL, description="TMDB API base URL")
    image_base_url: str = Field(
        default=TMDBConfig.IMAGE_BASE_URL,
        description="Base URL prepended to poster paths",
    )
    timeout: int = Field(
        default=Timeout.TMDB,
        gt=0,
        description="Request timeout in seconds",
    )
    include_credits: bool = Field(
        default=True,
        description="Request the credits block with movie details",
    )

    def __repr__(self) -> str:
        masked_key = "****" if self.api_key else "[empty]"
        return (
            f"TMDBSettings("
            f"api_key={masked_key}, "
            f"base_url={self.base_url!r}, "
            f"timeout={self.timeout}, "
            f"include_credits={self.include_credits})"
        )


class APISettings(BaseModel):
    """Container for external API configurations."""

    tmdb: TMDBSettings = Field(
        default_factory=TMDBSettings,
        description="TMDB API configuration",
    )


class CacheSettings(BaseModel):
    """Search cache configuration.

    The freshness window is fixed and therefore not configurable.
    """

    db_path: str = Field(
        default=Cache.DEFAULT_DB_PATH,
        description="SQLite file backing the search cache",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default=Logging.DEFAULT_LEVEL, description="Logging level")
    file: str | None = Field(default=None, description="Optional JSON log file path")
    console_output: bool = Field(default=True, description="Use Rich console output")


class Settings(BaseSettings):
    """Settings facade providing unified configuration access."""

    model_config = SettingsConfigDict(
        env_prefix=Application.ENV_PREFIX,
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from a TOML file; file values take precedence over the environment."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to a TOML file.

        API keys ARE written: config files are not logs.
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude_none=True)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)


__all__ = [
    "APISettings",
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "TMDBSettings",
]

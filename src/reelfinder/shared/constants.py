"""
ReelFinder Constants

Centralized constants for the TMDB endpoints, the search cache and the
console front end.
"""

from __future__ import annotations

from datetime import timedelta


class TMDBConfig:
    """TMDB API constants."""

    BASE_URL = "https://api.themoviedb.org/3"
    IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"

    SEARCH_MOVIE_PATH = "/search/movie"
    MOVIE_DETAILS_PATH = "/movie/{movie_id}"

    APPEND_CREDITS = "credits"

    # Environment variable read when no key is configured
    API_KEY_ENV = "TMDB_API_KEY"


class Timeout:
    """Network timeouts in seconds."""

    TMDB = 30


class Cache:
    """Search cache constants."""

    FRESHNESS_WINDOW = timedelta(minutes=60)
    SEARCH_KEY_PREFIX = "search_"
    # Timestamp keys live outside the "search_" namespace
    TIMESTAMP_PREFIX = "ts:"

    DEFAULT_DB_PATH = "cache/reelfinder_cache.db"
    TABLE_NAME = "kv"


class Logging:
    """Logging defaults."""

    DEFAULT_LEVEL = "INFO"


class Application:
    """Application identity."""

    NAME = "reelfinder"
    VERSION = "0.1.0"
    ENV_PREFIX = "REELFINDER_"
    DEFAULT_CONFIG_PATH = "config/config.toml"
    DEFAULT_ENV_FILE = ".env"


class CLIDefaults:
    """Console front end defaults."""

    EXIT_SUCCESS = 0
    EXIT_ERROR = 1
    EXIT_MISSING_CREDENTIAL = 2


class CLIMessages:
    """Console front end messages."""

    API_KEY_PROMPT = (
        "A TMDB API key is required. Pass --api-key or set the "
        "TMDB_API_KEY environment variable."
    )
    API_KEY_EMPTY = "API Key cannot be empty!"
    NO_RESULTS = "No results found."
    NO_IMAGE = "No image available for {path}"
    IMAGE_SAVED = "Saved poster to {path}"


__all__ = [
    "CLIDefaults",
    "CLIMessages",
    "Application",
    "Cache",
    "Logging",
    "TMDBConfig",
    "Timeout",
]

"""Dependency Injection container for ReelFinder.

The component graph is built once per process and handed to consumers
explicitly; nothing is looked up through module-level singletons.

The container manages:
- Settings (Singleton)
- Key/value store and search cache (Singleton, one database per process)
- Transport and activity tracker (Singleton, shared by all network calls)
- Metadata client, image fetcher and the consumer-facing movie API
"""

from __future__ import annotations

from dependency_injector import containers, providers

from reelfinder.config.loader import load_settings
from reelfinder.services.activity import ActivityTracker
from reelfinder.services.cache_store import SearchCache
from reelfinder.services.image_fetcher import ImageFetcher
from reelfinder.services.kv_store import SQLiteKeyValueStore
from reelfinder.services.movie_api import MovieAPI
from reelfinder.services.tmdb_client import MetadataClient
from reelfinder.services.transport import AiohttpTransport


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for ReelFinder services.

    Example:
        >>> container = Container()
        >>> movie_api = container.movie_api()
        >>> task = movie_api.search_movies("Heat", on_success, on_error)
    """

    # Configuration
    config = providers.Singleton(load_settings)

    # Persistence
    kv_store = providers.Singleton(
        SQLiteKeyValueStore,
        db_path=providers.Callable(lambda config: config.cache.db_path, config=config),
    )

    search_cache = providers.Singleton(SearchCache, store=kv_store)

    # Network
    activity = providers.Singleton(ActivityTracker)

    transport = providers.Singleton(
        AiohttpTransport,
        timeout=providers.Callable(lambda config: config.api.tmdb.timeout, config=config),
    )

    # Metadata access layer
    metadata_client = providers.Singleton(
        MetadataClient,
        transport=transport,
        cache=search_cache,
        settings=providers.Callable(lambda config: config.api.tmdb, config=config),
        activity=activity,
    )

    image_fetcher = providers.Singleton(
        ImageFetcher,
        transport=transport,
        image_base_url=providers.Callable(
            lambda config: config.api.tmdb.image_base_url,
            config=config,
        ),
        activity=activity,
    )

    movie_api = providers.Singleton(
        MovieAPI,
        client=metadata_client,
        image_fetcher=image_fetcher,
    )


__all__ = ["Container"]

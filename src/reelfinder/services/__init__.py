"""Services module for ReelFinder.

This module contains the metadata access layer: the TMDB client, the
search cache and its key/value store, the transport, the image fetcher
and the consumer-facing movie API.
"""

from .activity import ActivityTracker
from .cache_store import CacheEntry, SearchCache
from .image_fetcher import ImageFetcher
from .kv_store import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore
from .movie_api import ImageRequest, MovieAPI, UIHandler, wire
from .tmdb_client import MetadataClient
from .tmdb_models import CastMember, Genre, MovieDetails, SearchResult
from .transport import AiohttpTransport, Transport, TransportResponse

__all__ = [
    "ActivityTracker",
    "AiohttpTransport",
    "CacheEntry",
    "CastMember",
    "Genre",
    "ImageFetcher",
    "ImageRequest",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "MetadataClient",
    "MovieAPI",
    "MovieDetails",
    "SQLiteKeyValueStore",
    "SearchCache",
    "SearchResult",
    "Transport",
    "TransportResponse",
    "UIHandler",
    "wire",
]

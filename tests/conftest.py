"""
Pytest configuration and shared fixtures for ReelFinder tests.

This module provides common fixtures wiring the metadata layer to an
in-memory store, a fake transport and a manual clock.
"""

from __future__ import annotations

import pytest

from reelfinder.config.models import TMDBSettings
from reelfinder.services.activity import ActivityTracker
from reelfinder.services.cache_store import SearchCache
from reelfinder.services.image_fetcher import ImageFetcher
from reelfinder.services.kv_store import InMemoryKeyValueStore
from reelfinder.services.movie_api import MovieAPI
from reelfinder.services.tmdb_client import MetadataClient
from tests.test_helpers import (
    BASE_URL,
    IMAGE_BASE_URL,
    TEST_API_KEY,
    FakeTransport,
    ManualClock,
)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def search_cache(kv_store: InMemoryKeyValueStore) -> SearchCache:
    return SearchCache(kv_store)


@pytest.fixture
def tmdb_settings() -> TMDBSettings:
    return TMDBSettings(api_key=TEST_API_KEY, base_url=BASE_URL, image_base_url=IMAGE_BASE_URL)


@pytest.fixture
def activity() -> ActivityTracker:
    return ActivityTracker()


@pytest.fixture
def client(
    transport: FakeTransport,
    search_cache: SearchCache,
    tmdb_settings: TMDBSettings,
    activity: ActivityTracker,
    clock: ManualClock,
) -> MetadataClient:
    """MetadataClient with a configured API key."""
    return MetadataClient(
        transport=transport,
        cache=search_cache,
        settings=tmdb_settings,
        activity=activity,
        clock=clock,
    )


@pytest.fixture
def keyless_client(
    transport: FakeTransport,
    search_cache: SearchCache,
    clock: ManualClock,
) -> MetadataClient:
    """MetadataClient without an API key."""
    return MetadataClient(
        transport=transport,
        cache=search_cache,
        settings=TMDBSettings(api_key="", base_url=BASE_URL),
        clock=clock,
    )


@pytest.fixture
def image_fetcher(transport: FakeTransport, activity: ActivityTracker) -> ImageFetcher:
    return ImageFetcher(transport, IMAGE_BASE_URL, activity=activity)


@pytest.fixture
def movie_api(client: MetadataClient, image_fetcher: ImageFetcher) -> MovieAPI:
    return MovieAPI(client, image_fetcher)

"""TMDB metadata client.

This module turns a search query or a movie identifier into validated
domain data. Searches go through a time-bounded persistent cache; detail
lookups always hit the network. Every failure is classified into one of
``MissingCredentialError``, ``TransportError``, ``EmptyResultError`` or
``MalformedResponseError`` and raised to the caller; nothing is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from urllib.parse import quote, urlencode

from reelfinder.config.models import TMDBSettings
from reelfinder.services.activity import ActivityTracker
from reelfinder.services.cache_store import SearchCache, utc_now
from reelfinder.services.tmdb_models import (
    MovieDetails,
    SearchResult,
    decode_movie_details,
    decode_search_results,
)
from reelfinder.services.transport import Transport, TransportResponse
from reelfinder.shared.constants import TMDBConfig
from reelfinder.shared.errors import (
    EmptyResultError,
    ErrorContext,
    InfrastructureError,
    MalformedResponseError,
    MissingCredentialError,
    TransportError,
)
from reelfinder.shared.logging import log_operation_error, log_operation_success, redact_url

logger = logging.getLogger(__name__)


class MetadataClient:
    """TMDB client with a search cache and classified errors.

    Args:
        transport: HTTP transport used for every outbound request
        cache: Search cache consulted before any search request
        settings: TMDB settings (base URL, initial API key, credits flag)
        activity: Tracker backing the ``loading`` flag
        clock: Returns the current UTC time; used for cache freshness
    """

    def __init__(
        self,
        transport: Transport,
        cache: SearchCache,
        settings: TMDBSettings | None = None,
        activity: ActivityTracker | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.transport = transport
        self.cache = cache
        self.settings = settings or TMDBSettings()
        self.activity = activity or ActivityTracker()
        self.clock = clock
        self._api_key: str | None = self.settings.api_key or None

        logger.debug(
            "MetadataClient initialized (base_url=%s, credential=%s)",
            self.settings.base_url,
            "set" if self._api_key else "missing",
        )

    # ------------------------------------------------------------------
    # Credential
    # ------------------------------------------------------------------
    def set_credential(self, api_key: str) -> None:
        """Store the API key used by subsequently constructed requests."""
        self._api_key = api_key or None
        logger.info("TMDB API key %s", "updated" if self._api_key else "cleared")

    @property
    def has_credential(self) -> bool:
        return self._api_key is not None

    @property
    def loading(self) -> bool:
        """True while a network operation is in flight."""
        return self.activity.busy

    def _require_credential(self, context: ErrorContext) -> str:
        if self._api_key is None:
            error = MissingCredentialError(context=context)
            log_operation_error(logger=logger, error=error, level=logging.WARNING)
            raise error
        return self._api_key

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------
    @property
    def _base_url(self) -> str:
        return self.settings.base_url.rstrip("/")

    def search_url(self, query: str, api_key: str) -> str:
        """Build the search endpoint URL with an escaped query."""
        params = urlencode({"api_key": api_key, "query": query}, quote_via=quote)
        return f"{self._base_url}{TMDBConfig.SEARCH_MOVIE_PATH}?{params}"

    def details_url(self, movie_id: int, api_key: str) -> str:
        """Build the movie details endpoint URL."""
        query: dict[str, str] = {"api_key": api_key}
        if self.settings.include_credits:
            query["append_to_response"] = TMDBConfig.APPEND_CREDITS
        path = TMDBConfig.MOVIE_DETAILS_PATH.format(movie_id=movie_id)
        return f"{self._base_url}{path}?{urlencode(query, quote_via=quote)}"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def search(self, query: str) -> tuple[SearchResult, ...]:
        """Search movies by title.

        A fresh cache entry is returned without touching the network.
        On a miss or a stale entry the search endpoint is queried, and a
        body that decodes successfully is written back to the cache.

        Args:
            query: Raw search text (used verbatim for the cache key)

        Returns:
            Matching movies in server order

        Raises:
            MissingCredentialError: If no API key is configured
            TransportError: On connection failure or a non-2xx status
            EmptyResultError: If the server returned an empty body
            MalformedResponseError: If the body is not a search response
        """
        context = ErrorContext(operation="search_movies", additional_data={"query": query})
        api_key = self._require_credential(context)

        key = self.cache.key_for(query)
        cached = self._read_fresh(key)
        if cached is not None:
            logger.debug("Cache hit for query %r (%d results)", query, len(cached))
            return cached

        url = self.search_url(query, api_key)
        response = await self._request(url, "search_movies")

        if not response.success:
            raise self._transport_error(response, context)

        if not response.body.strip():
            error = EmptyResultError(context=context)
            log_operation_error(logger=logger, error=error, level=logging.INFO)
            raise error

        try:
            results = decode_search_results(response.body)
        except MalformedResponseError as error:
            log_operation_error(logger=logger, error=error, additional_context=context)
            raise

        self._write_cache(key, response.body)

        log_operation_success(
            logger=logger,
            operation="search_movies",
            duration_ms=0,
            result_info={"result_count": len(results)},
            context=context,
        )
        return results

    async def get_details(self, movie_id: int) -> MovieDetails:
        """Fetch full details for one movie. Never cached.

        Raises:
            MissingCredentialError: If no API key is configured
            TransportError: On connection failure or a non-2xx status
            MalformedResponseError: If the body is empty or not a details response
        """
        context = ErrorContext(operation="get_movie_details", additional_data={"movie_id": movie_id})
        api_key = self._require_credential(context)

        url = self.details_url(movie_id, api_key)
        response = await self._request(url, "get_movie_details")

        if not response.success:
            raise self._transport_error(response, context)

        try:
            if not response.body.strip():
                raise MalformedResponseError("Empty movie details response", context=context)
            details = decode_movie_details(response.body)
        except MalformedResponseError as error:
            log_operation_error(logger=logger, error=error, additional_context=context)
            raise

        log_operation_success(
            logger=logger,
            operation="get_movie_details",
            duration_ms=0,
            result_info={"genres": len(details.genres), "cast": len(details.cast)},
            context=context,
        )
        return details

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _request(self, url: str, operation: str) -> TransportResponse:
        logger.debug("%s -> GET %s", operation, redact_url(url))
        with self.activity.track(operation):
            return await self.transport.get(url)

    def _transport_error(self, response: TransportResponse, context: ErrorContext) -> TransportError:
        error = TransportError(
            response.error or "Request failed",
            status=response.status,
            context=context,
        )
        log_operation_error(logger=logger, error=error)
        return error

    def _read_fresh(self, key: str) -> tuple[SearchResult, ...] | None:
        """Decoded results of a fresh entry, or None on miss, stale or corrupt.

        A fresh entry whose payload no longer decodes counts as a miss and is
        refetched, so cache damage never surfaces as MalformedResponseError
        (see "Corrupted fresh payload" in DESIGN.md).
        """
        entry = self.cache.get(key)
        if entry is None:
            return None

        if not self.cache.is_fresh(entry, self.clock()):
            logger.debug("Cache entry for key '%s' is stale (written %s)", key, entry.written_at)
            return None

        try:
            return decode_search_results(entry.payload)
        except MalformedResponseError as e:
            logger.warning("Cached payload for key '%s' is corrupted, refetching: %s", key, e.message)
            return None

    def _write_cache(self, key: str, body: bytes) -> None:
        try:
            self.cache.put(key, body.decode("utf-8"), self.clock())
        except InfrastructureError as e:
            # Results are still valid; only the cache write was lost.
            logger.warning("Search results not cached for key '%s': %s", key, e.message)


__all__ = ["MetadataClient"]

"""Search cache with a fixed freshness window.

Entries are stored in a flat string key/value store as two keys: the raw
response payload under ``key`` and its ISO-8601 UTC write time under
``"ts:" + key``. Search keys always start with ``"search_"``, so no query
can land in another query's timestamp slot. ``SearchCache`` hides the
split: both keys are written in one store transaction and a read reports
either a whole entry or nothing.

Expiry is checked on read only. Stale entries are superseded when the
same query is fetched again and otherwise stay in storage.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field

from reelfinder.services.kv_store import KeyValueStore
from reelfinder.shared.constants import Cache
from reelfinder.shared.errors import ErrorCode, ErrorContext, InfrastructureError
from reelfinder.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CacheEntry(BaseModel):
    """A cached payload with the time it was written.

    Attributes:
        key: Cache key the entry is stored under
        payload: Raw response body that decoded successfully when written
        written_at: UTC time of the write that created or replaced the entry
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Cache key")
    payload: str = Field(..., description="Serialized response body")
    written_at: datetime = Field(..., description="UTC write timestamp")


class SearchCache:
    """Time-bounded cache for search responses.

    Args:
        store: Persistence boundary holding payloads and timestamps
        freshness_window: Age at which an entry becomes stale
    """

    def __init__(
        self,
        store: KeyValueStore,
        freshness_window: timedelta = Cache.FRESHNESS_WINDOW,
    ) -> None:
        self.store = store
        self.freshness_window = freshness_window

    @staticmethod
    def key_for(query: str) -> str:
        """Derive the cache key for a raw search query.

        Prefix concatenation without normalization, so distinct queries
        (including case and whitespace variants) never share a key.
        """
        return f"{Cache.SEARCH_KEY_PREFIX}{query}"

    @staticmethod
    def _timestamp_key(key: str) -> str:
        return f"{Cache.TIMESTAMP_PREFIX}{key}"

    def get(self, key: str) -> CacheEntry | None:
        """Read an entry.

        Absence, a half-written entry, an unparsable timestamp and store
        read failures are all reported as ``None``.
        """
        try:
            payload = self.store.get(key)
            raw_timestamp = self.store.get(self._timestamp_key(key))
        except (OSError, sqlite3.Error) as e:
            error = InfrastructureError(
                code=ErrorCode.CACHE_READ_FAILED,
                message=f"Failed to read cache entry for key '{key}': {e!s}",
                context=ErrorContext(operation="cache_get", additional_data={"key": key}),
                original_error=e,
            )
            log_operation_error(logger=logger, error=error, level=logging.WARNING)
            return None

        if payload is None or raw_timestamp is None:
            if payload is not None or raw_timestamp is not None:
                logger.warning("Incomplete cache entry for key '%s', treating as miss", key)
            return None

        try:
            written_at = _as_utc(datetime.fromisoformat(raw_timestamp.replace("Z", "+00:00")))
        except ValueError:
            logger.warning(
                "Invalid cache timestamp %r for key '%s', treating as miss",
                raw_timestamp,
                key,
            )
            return None

        return CacheEntry(key=key, payload=payload, written_at=written_at)

    def put(self, key: str, payload: str, written_at: datetime) -> None:
        """Write (or overwrite) an entry.

        Raises:
            InfrastructureError: If the store rejects the write
        """
        timestamp = _as_utc(written_at).isoformat()
        context = ErrorContext(
            operation="cache_put",
            additional_data={"key": key, "written_at": timestamp},
        )

        try:
            self.store.set_many({key: payload, self._timestamp_key(key): timestamp})
        except (OSError, sqlite3.Error) as e:
            error = InfrastructureError(
                code=ErrorCode.CACHE_WRITE_FAILED,
                message=f"Failed to write cache entry for key '{key}': {e!s}",
                context=context,
                original_error=e,
            )
            log_operation_error(logger=logger, error=error, operation="cache_put")
            raise error from e

        log_operation_success(logger=logger, operation="cache_put", duration_ms=0, context=context)

    def delete(self, key: str) -> None:
        """Remove an entry; removing a missing entry is a no-op."""
        self.store.delete_many([key, self._timestamp_key(key)])
        logger.debug("Deleted cache entry for key '%s'", key)

    def is_fresh(self, entry: CacheEntry, now: datetime) -> bool:
        """True while the entry is younger than the freshness window.

        An entry exactly as old as the window is stale.
        """
        return _as_utc(now) - entry.written_at < self.freshness_window


__all__ = [
    "CacheEntry",
    "SearchCache",
    "utc_now",
]

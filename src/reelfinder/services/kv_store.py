"""Durable string key/value stores.

The persistence boundary of the search cache: a flat string store with
single-key operations plus multi-key writes and deletes that are applied
atomically.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol

from reelfinder.shared.constants import Cache
from reelfinder.shared.errors import ErrorCode, ErrorContext, InfrastructureError
from reelfinder.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """String key/value store used by the search cache."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def has(self, key: str) -> bool: ...

    def set_many(self, items: Mapping[str, str]) -> None: ...

    def delete_many(self, keys: Iterable[str]) -> None: ...

    def close(self) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store backed by a dict."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def has(self, key: str) -> bool:
        return key in self._data

    def set_many(self, items: Mapping[str, str]) -> None:
        with self._lock:
            self._data.update(items)

    def delete_many(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the stored data."""
        with self._lock:
            return dict(self._data)

    def close(self) -> None:
        """Nothing to release."""


class SQLiteKeyValueStore:
    """SQLite-backed durable store.

    A single ``kv`` table in WAL mode. Multi-key operations run in one
    transaction, so a reader never sees half of a ``set_many``.

    Example:
        >>> store = SQLiteKeyValueStore(Path("cache.db"))
        >>> store.set("search_batman", '{"results": []}')
        >>> store.get("search_batman")
        '{"results": []}'
        >>> store.close()
    """

    def __init__(self, db_path: Path | str) -> None:
        """Open (and create if needed) the database.

        Raises:
            InfrastructureError: If the database cannot be initialized
        """
        self.db_path = Path(db_path)
        self._lock = threading.RLock()
        self.conn: sqlite3.Connection | None = None
        self._initialize_db()

    def _initialize_db(self) -> None:
        context = ErrorContext(
            operation="initialize_kv_store",
            additional_data={"db_path": str(self.db_path)},
        )

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                isolation_level=None,  # Auto-commit; explicit BEGIN for batches
            )
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")
            self.conn.execute(
                f"CREATE TABLE IF NOT EXISTS {Cache.TABLE_NAME} ("
                "key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
        except (OSError, sqlite3.Error) as e:
            error = InfrastructureError(
                code=ErrorCode.STORAGE_INIT_FAILED,
                message=f"Failed to initialize key/value store: {e}",
                context=context,
                original_error=e,
            )
            log_operation_error(logger=logger, error=error, operation="initialize_kv_store")
            raise error from e

        log_operation_success(
            logger=logger,
            operation="initialize_kv_store",
            duration_ms=0,
            context=context,
        )

    @property
    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            msg = "Key/value store is closed"
            raise sqlite3.ProgrammingError(msg)
        return self.conn

    def get(self, key: str) -> str | None:
        with self._lock:
            row = self._connection.execute(
                f"SELECT value FROM {Cache.TABLE_NAME} WHERE key = ?",
                (key,),
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def delete(self, key: str) -> None:
        self.delete_many([key])

    def has(self, key: str) -> bool:
        with self._lock:
            row = self._connection.execute(
                f"SELECT 1 FROM {Cache.TABLE_NAME} WHERE key = ?",
                (key,),
            ).fetchone()
        return row is not None

    def set_many(self, items: Mapping[str, str]) -> None:
        self._execute_batch(
            f"INSERT OR REPLACE INTO {Cache.TABLE_NAME} (key, value) VALUES (?, ?)",
            list(items.items()),
        )

    def delete_many(self, keys: Iterable[str]) -> None:
        self._execute_batch(
            f"DELETE FROM {Cache.TABLE_NAME} WHERE key = ?",
            [(key,) for key in keys],
        )

    def _execute_batch(self, sql: str, rows: list[tuple[str, ...]]) -> None:
        """Run *sql* for every row in one transaction.

        A failure at any point, COMMIT included, rolls the transaction back
        so the connection is usable for the next batch.
        """
        with self._lock:
            conn = self._connection
            conn.execute("BEGIN")
            try:
                conn.executemany(sql, rows)
                conn.execute("COMMIT")
            except sqlite3.Error:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
                logger.debug("Closed key/value store %s", self.db_path)


__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SQLiteKeyValueStore",
]

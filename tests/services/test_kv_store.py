"""Tests for the key/value stores backing the search cache."""

from __future__ import annotations

import sqlite3

import pytest

from reelfinder.services.kv_store import InMemoryKeyValueStore, SQLiteKeyValueStore
from reelfinder.shared.errors import ErrorCode, InfrastructureError


@pytest.fixture
def sqlite_store(tmp_path):
    store = SQLiteKeyValueStore(tmp_path / "cache" / "kv.db")
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    """Both store implementations, exercised through the same contract."""
    if request.param == "memory":
        yield InMemoryKeyValueStore()
        return
    store = SQLiteKeyValueStore(tmp_path / "kv.db")
    yield store
    store.close()


class TestStoreContract:
    def test_get_missing_key(self, any_store):
        assert any_store.get("search_Heat") is None
        assert any_store.has("search_Heat") is False

    def test_set_and_get(self, any_store):
        any_store.set("search_Heat", '{"results": []}')
        assert any_store.get("search_Heat") == '{"results": []}'
        assert any_store.has("search_Heat") is True

    def test_set_overwrites(self, any_store):
        any_store.set("key", "old")
        any_store.set("key", "new")
        assert any_store.get("key") == "new"

    def test_delete(self, any_store):
        any_store.set("key", "value")
        any_store.delete("key")
        assert any_store.get("key") is None

    def test_delete_missing_key_is_noop(self, any_store):
        any_store.delete("never-written")
        assert any_store.has("never-written") is False

    def test_set_many_and_delete_many(self, any_store):
        any_store.set_many({"a": "1", "ts:a": "2024-01-01T00:00:00+00:00"})
        assert any_store.get("a") == "1"
        assert any_store.get("ts:a") == "2024-01-01T00:00:00+00:00"

        any_store.delete_many(["a", "ts:a"])
        assert any_store.get("a") is None
        assert any_store.get("ts:a") is None

    def test_unicode_keys_and_values(self, any_store):
        any_store.set("search_アキラ", "東京")
        assert any_store.get("search_アキラ") == "東京"


class TestInMemoryKeyValueStore:
    def test_initial_data_and_snapshot(self):
        store = InMemoryKeyValueStore({"k": "v"})
        snapshot = store.snapshot()
        snapshot["k"] = "changed"
        assert store.get("k") == "v"


class TestSQLiteKeyValueStore:
    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "kv.db"
        store = SQLiteKeyValueStore(db_path)
        try:
            assert db_path.exists()
        finally:
            store.close()

    def test_wal_mode_enabled(self, sqlite_store):
        mode = sqlite_store.conn.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode.lower() == "wal"

    def test_data_persists_across_instances(self, tmp_path):
        db_path = tmp_path / "kv.db"
        first = SQLiteKeyValueStore(db_path)
        first.set_many({"search_Heat": "payload", "ts:search_Heat": "ts"})
        first.close()

        second = SQLiteKeyValueStore(db_path)
        try:
            assert second.get("search_Heat") == "payload"
            assert second.get("ts:search_Heat") == "ts"
        finally:
            second.close()

    def test_set_many_is_atomic(self, sqlite_store):
        """A failing batch leaves no partial write behind."""
        sqlite_store.set("a", "original")

        class ExplodingItems(dict):
            def items(self):
                yield ("a", "replaced")
                yield ("b", None)  # NOT NULL constraint violation

        with pytest.raises(sqlite3.Error):
            sqlite_store.set_many(ExplodingItems())

        assert sqlite_store.get("a") == "original"
        assert sqlite_store.get("b") is None

    def test_commit_failure_rolls_back(self, sqlite_store):
        """A failed COMMIT leaves no open transaction on the connection."""

        class LockedOnCommit:
            def __init__(self, conn):
                self._conn = conn
                self.failed = False

            def execute(self, sql, *args):
                if sql == "COMMIT" and not self.failed:
                    self.failed = True
                    raise sqlite3.OperationalError("database is locked")
                return self._conn.execute(sql, *args)

            def __getattr__(self, name):
                return getattr(self._conn, name)

        sqlite_store.conn = LockedOnCommit(sqlite_store.conn)

        with pytest.raises(sqlite3.OperationalError):
            sqlite_store.set_many({"search_Heat": "payload", "ts:search_Heat": "now"})

        assert sqlite_store.conn.in_transaction is False
        assert sqlite_store.get("search_Heat") is None

        sqlite_store.set("a", "1")
        assert sqlite_store.get("a") == "1"

    def test_use_after_close(self, tmp_path):
        store = SQLiteKeyValueStore(tmp_path / "kv.db")
        store.close()
        store.close()  # idempotent

        with pytest.raises(sqlite3.ProgrammingError):
            store.get("key")

    def test_initialization_failure(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file", encoding="utf-8")

        with pytest.raises(InfrastructureError) as exc_info:
            SQLiteKeyValueStore(blocker / "kv.db")

        assert exc_info.value.code is ErrorCode.STORAGE_INIT_FAILED

"""Unit tests for the key/value state backends."""

from __future__ import annotations

import pytest

from swarmjot.core.kvstore import KeyValueStore, MemoryStore, SQLiteStore


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    if request.param == "memory":
        yield MemoryStore()
    else:
        store = SQLiteStore(tmp_path / "nested" / "state.db")
        yield store
        store.close()


# ---------------------------------------------------------------------------
# Test: shared behaviour
# ---------------------------------------------------------------------------


class TestKeyValueStore:

    def test_satisfies_protocol(self, any_store):
        assert isinstance(any_store, KeyValueStore)

    def test_missing_key_is_none(self, any_store):
        assert any_store.get("nope") is None

    def test_set_get_overwrite(self, any_store):
        any_store.set("k", {"a": 1})
        any_store.set("k", {"a": 2, "b": [1, 2]})
        assert any_store.get("k") == {"a": 2, "b": [1, 2]}

    def test_remove_is_idempotent(self, any_store):
        any_store.set("k", "v")
        any_store.remove("k")
        any_store.remove("k")
        assert any_store.get("k") is None

    def test_keys_by_prefix_sorted(self, any_store):
        for key in ("draft:b", "draft:a", "asset:x"):
            any_store.set(key, 1)
        assert any_store.keys("draft:") == ["draft:a", "draft:b"]
        assert any_store.keys() == ["asset:x", "draft:a", "draft:b"]

    def test_values_do_not_alias_callers(self, any_store):
        value = {"tags": ["a"]}
        any_store.set("k", value)
        value["tags"].append("b")
        fetched = any_store.get("k")
        fetched["tags"].append("c")
        assert any_store.get("k") == {"tags": ["a"]}


# ---------------------------------------------------------------------------
# Test: SQLite persistence
# ---------------------------------------------------------------------------


class TestSQLitePersistence:

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "state.db"
        first = SQLiteStore(path)
        first.set("swarmjot:postage:last", "ab" * 32)
        first.close()

        second = SQLiteStore(path)
        assert second.get("swarmjot:postage:last") == "ab" * 32
        second.close()

    def test_unreadable_value_is_discarded(self, tmp_path):
        store = SQLiteStore(tmp_path / "state.db")
        store._db.execute("INSERT INTO kv (key, value) VALUES ('bad', '{not json')")
        store._db.commit()
        assert store.get("bad") is None
        store.close()

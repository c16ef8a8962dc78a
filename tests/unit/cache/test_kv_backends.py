"""Unit tests for persistent-tier key-value stores."""

import json

import pytest
from structlog.testing import capture_logs

from futureresume.cache import Cache, JsonFileKeyValueStore, StorageTier
from futureresume.cache.backends import InMemoryKeyValueStore
from futureresume.core.exceptions import StorageQuotaExceeded


class TestInMemoryKeyValueStore:
    def test_basic_operations(self):
        store = InMemoryKeyValueStore()
        store.set_item("a", "1")
        store.set_item("b", "2")

        assert store.length == 2
        assert store.get_item("a") == "1"
        assert store.key(0) == "a"
        assert store.key(1) == "b"
        assert store.key(2) is None

        store.remove_item("a")
        store.remove_item("missing")
        assert store.length == 1

    def test_used_bytes_counts_keys_and_values(self):
        store = InMemoryKeyValueStore()
        store.set_item("ab", "cde")
        assert store.used_bytes == 5

    def test_quota_rejects_oversized_write(self):
        store = InMemoryKeyValueStore(quota_bytes=6)
        store.set_item("a", "12345")

        with pytest.raises(StorageQuotaExceeded) as exc_info:
            store.set_item("b", "1")

        assert exc_info.value.key == "b"
        assert store.length == 1

    def test_quota_accounts_for_overwrite(self):
        store = InMemoryKeyValueStore(quota_bytes=6)
        store.set_item("a", "12345")
        store.set_item("a", "54321")
        assert store.get_item("a") == "54321"

    def test_invalid_quota(self):
        with pytest.raises(ValueError):
            InMemoryKeyValueStore(quota_bytes=0)


class TestJsonFileKeyValueStore:
    def test_entries_survive_new_instance(self, tmp_path):
        path = tmp_path / "nested" / "cache.json"
        store = JsonFileKeyValueStore(path)
        store.set_item("a", "1")

        reopened = JsonFileKeyValueStore(path)
        assert reopened.get_item("a") == "1"
        assert reopened.length == 1
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}

    def test_remove_is_persisted(self, tmp_path):
        path = tmp_path / "cache.json"
        store = JsonFileKeyValueStore(path)
        store.set_item("a", "1")
        store.set_item("b", "2")
        store.remove_item("a")

        reopened = JsonFileKeyValueStore(path)
        assert reopened.get_item("a") is None
        assert reopened.key(0) == "b"

    def test_missing_file_starts_empty(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "absent.json")
        assert store.length == 0
        assert not store.path.exists()

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{broken", encoding="utf-8")

        with capture_logs() as logs:
            store = JsonFileKeyValueStore(path)

        assert store.length == 0
        assert logs[0]["event"] == "kv_store_load_failed"

    def test_non_object_file_starts_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert JsonFileKeyValueStore(path).length == 0

    def test_no_temp_file_left_behind(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "cache.json")
        store.set_item("a", "1")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["cache.json"]

    def test_cache_persistent_tier_survives_restart(self, tmp_path, clock):
        path = tmp_path / "cache.json"
        Cache(store=JsonFileKeyValueStore(path), clock=clock).set(
            "template:basic", {"layout": "one-column"}, ttl=600, tier=StorageTier.PERSISTENT
        )

        restarted = Cache(store=JsonFileKeyValueStore(path), clock=clock)
        assert restarted.get("template:basic", tier=StorageTier.PERSISTENT) == {
            "layout": "one-column"
        }

"""Tests for the transactional JSON document store."""

import json
import threading

import pytest

from orderdesk.domain.exceptions import StorageError
from orderdesk.infrastructure.persistence.json_store import TABLES, JsonStore


def _on_disk(store: JsonStore) -> dict:
    return json.loads(store.file_path.read_text(encoding="utf-8"))


class TestJsonStoreFile:

    def test_creates_empty_document(self, tmp_path):
        store = JsonStore(tmp_path / "nested" / "data.json")
        assert _on_disk(store) == {table: [] for table in TABLES}

    def test_write_through_outside_transaction(self, tmp_path):
        store = JsonStore(tmp_path / "data.json")
        store.persist("users", [{"id": 1, "name": "Ada"}])
        assert _on_disk(store)["users"] == [{"id": 1, "name": "Ada"}]

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonStore(path)
        with pytest.raises(StorageError, match="Cannot read"):
            store.load("orders")


class TestJsonStoreTransactions:

    def test_commit_makes_staged_writes_visible(self, tmp_path):
        store = JsonStore(tmp_path / "data.json")
        store.begin()
        store.persist("products", [{"id": 1}])

        assert store.load("products") == [{"id": 1}]
        assert _on_disk(store)["products"] == []

        store.commit()
        assert _on_disk(store)["products"] == [{"id": 1}]
        assert not store.in_transaction

    def test_rollback_discards_staged_writes(self, tmp_path):
        store = JsonStore(tmp_path / "data.json")
        store.persist("products", [{"id": 1}])

        store.begin()
        store.persist("products", [])
        store.persist("orders", [{"id": 9}])
        store.rollback()

        assert store.load("products") == [{"id": 1}]
        assert store.load("orders") == []

    def test_loaded_records_are_copies(self, tmp_path):
        store = JsonStore(tmp_path / "data.json")
        store.begin()
        store.persist("users", [{"id": 1, "name": "Ada"}])
        store.load("users")[0]["name"] = "changed"
        assert store.load("users")[0]["name"] == "Ada"
        store.rollback()

    def test_nested_begin_rejected(self, tmp_path):
        store = JsonStore(tmp_path / "data.json")
        store.begin()
        with pytest.raises(StorageError, match="already in progress"):
            store.begin()
        assert store.in_transaction
        store.rollback()

    def test_commit_without_transaction_rejected(self, tmp_path):
        store = JsonStore(tmp_path / "data.json")
        with pytest.raises(StorageError, match="no transaction"):
            store.commit()

    def test_failed_commit_ends_transaction(self, tmp_path, monkeypatch):
        store = JsonStore(tmp_path / "data.json")

        def fail(data):
            raise StorageError("disk full")

        store.begin()
        store.persist("users", [{"id": 1, "name": "Ada"}])
        monkeypatch.setattr(store, "_write_file", fail)

        with pytest.raises(StorageError, match="disk full"):
            store.commit()

        monkeypatch.undo()
        assert not store.in_transaction
        assert store.load("users") == []

    def test_other_threads_see_committed_state(self, tmp_path):
        store = JsonStore(tmp_path / "data.json")
        store.begin()
        store.persist("users", [{"id": 1, "name": "Ada"}])

        seen = []
        reader = threading.Thread(target=lambda: seen.append(store.load("users")))
        reader.start()
        reader.join(timeout=5)
        store.commit()

        assert seen == [[]]


class TestJsonStoreSharedFile:
    """Two stores opened on one file exclude each other through the lock file."""

    def test_second_transaction_waits_for_first_commit(self, tmp_path):
        first = JsonStore(tmp_path / "data.json")
        second = JsonStore(tmp_path / "data.json")

        first.begin()
        first.persist("products", [{"id": 1, "stock_quantity": 0}])

        seen = []

        def take_second_transaction():
            second.begin()
            seen.append(second.load("products"))
            second.rollback()

        worker = threading.Thread(target=take_second_transaction)
        worker.start()
        worker.join(timeout=0.3)
        assert worker.is_alive()
        assert seen == []

        first.commit()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert seen == [[{"id": 1, "stock_quantity": 0}]]

    def test_write_through_waits_and_keeps_committed_tables(self, tmp_path):
        first = JsonStore(tmp_path / "data.json")
        second = JsonStore(tmp_path / "data.json")

        first.begin()
        first.persist("users", [{"id": 1, "name": "Ada"}])

        writer = threading.Thread(
            target=lambda: second.persist("products", [{"id": 7}])
        )
        writer.start()
        writer.join(timeout=0.3)
        assert writer.is_alive()

        first.commit()
        writer.join(timeout=5)

        on_disk = _on_disk(first)
        assert on_disk["users"] == [{"id": 1, "name": "Ada"}]
        assert on_disk["products"] == [{"id": 7}]

    def test_lock_file_sits_next_to_data_file(self, tmp_path):
        JsonStore(tmp_path / "data.json")
        assert (tmp_path / ".data.json.lock").exists()


class TestJsonStoreTempFiles:

    def test_commits_leave_no_temp_files(self, tmp_path):
        store = JsonStore(tmp_path / "data.json")
        for n in range(3):
            store.begin()
            store.persist("orders", [{"id": n}])
            store.commit()
        store.persist("users", [])

        assert list(tmp_path.glob("*.tmp")) == []

    def test_failed_replace_removes_temp_file(self, tmp_path, monkeypatch):
        store = JsonStore(tmp_path / "data.json")

        def refuse(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr("orderdesk.infrastructure.persistence.json_store.os.replace", refuse)
        with pytest.raises(StorageError, match="read-only file system"):
            store.persist("users", [{"id": 1}])

        monkeypatch.undo()
        assert list(tmp_path.glob("*.tmp")) == []
        assert _on_disk(store)["users"] == []

"""Tests for the object stores."""

import logging
import threading
from pathlib import Path

import pytest

from config_registry.core.exceptions import ObjectExistsError, StorageError
from config_registry.storage.base import StoredRecord, check_key
from config_registry.storage.file_store import FileObjectStore
from config_registry.storage.memory import MemoryObjectStore


@pytest.fixture
def store(temp_dir: Path) -> FileObjectStore:
    return FileObjectStore(temp_dir / "registry")


class TestFileObjectStore:
    """Tests for FileObjectStore."""

    def test_creates_root(self, temp_dir: Path) -> None:
        store = FileObjectStore(temp_dir / "nested" / "registry")
        assert store.root.is_dir()

    def test_put_get(self, store: FileObjectStore) -> None:
        store.put("target", "t1", b'{"a": 1}')

        assert store.get("target", "t1") == b'{"a": 1}'
        assert (store.root / "target" / "t1.json").exists()

    def test_get_missing(self, store: FileObjectStore) -> None:
        assert store.get("target", "nope") is None

    def test_put_overwrites(self, store: FileObjectStore) -> None:
        store.put("target", "t1", b"old")
        store.put("target", "t1", b"new")

        assert store.get("target", "t1") == b"new"

    def test_create_only_conflict(self, store: FileObjectStore) -> None:
        """create_only refuses to replace an existing key."""
        store.put("target", "t1", b"first", create_only=True)

        with pytest.raises(ObjectExistsError):
            store.put("target", "t1", b"second", create_only=True)

        assert store.get("target", "t1") == b"first"

    def test_create_only_race(self, store: FileObjectStore) -> None:
        """Exactly one of several concurrent creators wins."""
        outcomes: list[str] = []
        lock = threading.Lock()

        def create(n: int) -> None:
            try:
                store.put("correlation", "shared", str(n).encode(), create_only=True)
                result = "ok"
            except ObjectExistsError:
                result = "exists"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=create, args=(n,)) for n in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("ok") == 1

    def test_no_temp_files_left(self, store: FileObjectStore) -> None:
        store.put("target", "t1", b"x")
        store.put("target", "t1", b"y")
        with pytest.raises(ObjectExistsError):
            store.put("target", "t1", b"z", create_only=True)

        assert [p.name for p in (store.root / "target").iterdir()] == ["t1.json"]

    def test_delete(self, store: FileObjectStore) -> None:
        store.put("target", "t1", b"x")

        assert store.delete("target", "t1") is True
        assert store.delete("target", "t1") is False
        assert store.get("target", "t1") is None

    def test_scan(self, store: FileObjectStore) -> None:
        """Scan yields one kind only, sorted by id, skipping stray temp files."""
        store.put("target", "b", b"2")
        store.put("target", "a", b"1")
        store.put("correlation", "c", b"3")
        (store.root / "target" / ".a.deadbeef.tmp").write_bytes(b"partial")

        assert list(store.scan("target")) == [("a", b"1"), ("b", b"2")]

    def test_scan_skips_unreadable(self, store: FileObjectStore, caplog: pytest.LogCaptureFixture) -> None:
        """One unreadable record does not stop the rest from loading."""
        store.put("target", "good", b"1")
        (store.root / "target" / "broken.json").mkdir()

        with caplog.at_level(logging.WARNING):
            scanned = list(store.scan("target"))

        assert scanned == [("good", b"1")]
        assert "Skipping unreadable target record" in caplog.text

    def test_scan_unknown_kind(self, store: FileObjectStore) -> None:
        assert list(store.scan("alert")) == []

    @pytest.mark.parametrize("object_id", ["../escape", "a/b", ".hidden", "", "x..y"])
    def test_rejects_unsafe_keys(self, store: FileObjectStore, object_id: str) -> None:
        with pytest.raises(StorageError) as exc_info:
            store.put("target", object_id, b"x")

        assert exc_info.value.operation == "key"


class TestMemoryObjectStore:
    """Tests for MemoryObjectStore."""

    def test_round_trip_and_scan(self) -> None:
        store = MemoryObjectStore()
        store.put("target", "t1", b"x")
        store.put("correlation", "c1", b"y")

        assert store.get("target", "t1") == b"x"
        assert list(store.scan("target")) == [("t1", b"x")]

    def test_create_only_conflict(self) -> None:
        store = MemoryObjectStore()
        store.put("target", "t1", b"x", create_only=True)

        with pytest.raises(ObjectExistsError):
            store.put("target", "t1", b"y", create_only=True)

    def test_delete(self) -> None:
        store = MemoryObjectStore()
        store.put("target", "t1", b"x")

        assert store.delete("target", "t1")
        assert not store.delete("target", "t1")


class TestStoredRecord:
    """Tests for the record envelope."""

    def test_seal_and_verify(self) -> None:
        record = StoredRecord(kind="target", object_id="t1", data={"name": "x"}).seal()

        assert record.checksum
        assert record.verify()

    def test_tampered_data_fails_verification(self) -> None:
        record = StoredRecord(kind="target", object_id="t1", data={"name": "x"}).seal()
        tampered = record.model_copy(update={"data": {"name": "y"}})

        assert not tampered.verify()

    def test_check_key_accepts_ids(self) -> None:
        check_key("correlation", "01ARZ3NDEKTSV4RRFFQ69G5FAV")
        check_key("correlation", "checkout-errors.v2")

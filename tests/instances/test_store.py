"""Tests for the one-file-per-pid instance store."""

from __future__ import annotations

import json
import stat
from pathlib import Path

import pytest

from devnode.exceptions import CorruptRecordError
from devnode.instances.store import InstanceStore, get_instance_store


class TestPutAndGet:
    """Tests for writing and reading records."""

    def test_put_then_get_returns_equal_record(self, store, make_record):
        """A stored record reads back unchanged."""
        record = make_record(pid=1234)

        store.put(record)

        assert store.get(1234) == record

    def test_put_names_file_after_pid(self, store, make_record):
        """The record file name is the decimal pid."""
        store.put(make_record(pid=77))

        assert (store.directory / "77").is_file()

    def test_put_creates_private_directory(self, store, make_record):
        """The store directory is created on first write with 0700."""
        assert not store.directory.exists()

        store.put(make_record())

        mode = stat.S_IMODE(store.directory.stat().st_mode)
        assert mode == 0o700

    def test_put_record_file_is_private(self, store, make_record):
        """Record files are only readable by the owner."""
        store.put(make_record(pid=55))

        mode = stat.S_IMODE(store.path_for(55).stat().st_mode)
        assert mode == 0o600

    def test_put_replaces_existing_record(self, store, make_record):
        """Writing the same pid twice keeps only the latest record."""
        store.put(make_record(pid=9, instance_name="first_name"))
        store.put(make_record(pid=9, instance_name="second_name"))

        assert store.get(9).instance_name == "second_name"
        assert store.list_pids() == [9]

    def test_put_leaves_no_temp_files(self, store, make_record):
        """Atomic writes clean up after themselves."""
        store.put(make_record(pid=3))

        assert [p.name for p in store.directory.iterdir()] == ["3"]

    def test_get_missing_raises_file_not_found(self, store):
        """Reading an unknown pid raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            store.get(999)


class TestCorruptRecords:
    """Tests for records that cannot be trusted."""

    def _write(self, store: InstanceStore, pid: int, content: bytes) -> None:
        store.directory.mkdir(parents=True, exist_ok=True)
        store.path_for(pid).write_bytes(content)

    def test_invalid_json_raises_corrupt(self, store):
        """Unparseable content raises CorruptRecordError."""
        self._write(store, 10, b"{not json")

        with pytest.raises(CorruptRecordError) as exc_info:
            store.get(10)

        assert exc_info.value.pid == 10
        assert "invalid JSON" in exc_info.value.reason

    def test_non_utf8_raises_corrupt(self, store):
        """Binary garbage raises CorruptRecordError."""
        self._write(store, 11, b"\xff\xfe\x00garbage")

        with pytest.raises(CorruptRecordError):
            store.get(11)

    def test_missing_fields_raise_corrupt(self, store):
        """Valid JSON that is not a record raises CorruptRecordError."""
        self._write(store, 12, json.dumps({"pid": 12}).encode())

        with pytest.raises(CorruptRecordError) as exc_info:
            store.get(12)

        assert "invalid record" in exc_info.value.reason

    def test_pid_mismatch_raises_corrupt(self, store, make_record):
        """A record whose pid disagrees with its file name is corrupt."""
        self._write(store, 13, make_record(pid=14).model_dump_json().encode())

        with pytest.raises(CorruptRecordError) as exc_info:
            store.get(13)

        assert "claims pid 14" in exc_info.value.reason

    def test_error_message_names_pid(self, store):
        """The exception message identifies the record."""
        self._write(store, 15, b"")

        with pytest.raises(CorruptRecordError, match="pid 15"):
            store.get(15)


class TestRemove:
    """Tests for deleting records."""

    def test_remove_existing_returns_true(self, store, make_record):
        """Removing a stored record deletes the file."""
        store.put(make_record(pid=20))

        assert store.remove(20) is True
        assert not store.path_for(20).exists()

    def test_remove_missing_returns_false(self, store):
        """Removing an unknown pid is not an error."""
        assert store.remove(20) is False


class TestListPids:
    """Tests for enumerating stored records."""

    def test_missing_directory_is_empty(self, store):
        """No directory means no records."""
        assert store.list_pids() == []

    def test_lists_all_pids_sorted(self, store, make_record):
        """Every stored pid is returned in ascending order."""
        for pid in (300, 5, 42):
            store.put(make_record(pid=pid))

        assert store.list_pids() == [5, 42, 300]

    def test_ignores_non_pid_entries(self, store, make_record):
        """Temp files, stray names and subdirectories are skipped."""
        store.put(make_record(pid=8))
        (store.directory / ".record_abc").write_text("partial")
        (store.directory / "notes.txt").write_text("hello")
        (store.directory / "0").write_text("{}")
        (store.directory / "123").mkdir()

        assert store.list_pids() == [8]

    def test_ignores_zero_padded_names(self, store, make_record):
        """Only the canonical spelling of a pid names its record."""
        store.put(make_record(pid=333))
        (store.directory / "0333").write_text(make_record(pid=333).model_dump_json())

        assert store.list_pids() == [333]


class TestGetInstanceStore:
    """Tests for the configured store."""

    def test_uses_data_dir_env(self, data_dir: Path):
        """The default store lives under DEVNODE_DATA_DIR/instances."""
        assert get_instance_store().directory == data_dir / "instances"

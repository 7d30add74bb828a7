"""Tests for shared file utilities."""

from __future__ import annotations

import stat
import threading
import time

import pytest

from devnode.utils.file_helpers import atomic_write_text, file_lock, set_secure_permissions


class TestAtomicWriteText:
    """Tests for atomic_write_text."""

    def test_writes_content_privately(self, tmp_path):
        target = tmp_path / "record"

        atomic_write_text(target, "hello\n")

        assert target.read_text() == "hello\n"
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_replaces_existing_file(self, tmp_path):
        target = tmp_path / "record"
        target.write_text("old")

        atomic_write_text(target, "new")

        assert target.read_text() == "new"

    def test_no_temp_file_left_on_failure(self, tmp_path, monkeypatch):
        """A failed rename cleans up the temp file and re-raises."""
        target = tmp_path / "record"

        def fail_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("devnode.utils.file_helpers.os.replace", fail_replace)

        with pytest.raises(OSError, match="disk full"):
            atomic_write_text(target, "data", prefix=".tmp_")

        assert list(tmp_path.iterdir()) == []

    def test_missing_parent_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            atomic_write_text(tmp_path / "missing" / "record", "data")


class TestSetSecurePermissions:
    """Tests for set_secure_permissions."""

    def test_directory_mode(self, tmp_path):
        directory = tmp_path / "private"
        directory.mkdir(mode=0o755)

        set_secure_permissions(directory, is_directory=True)

        assert stat.S_IMODE(directory.stat().st_mode) == 0o700

    def test_missing_path_is_ignored(self, tmp_path):
        set_secure_permissions(tmp_path / "nothing")


class TestFileLock:
    """Tests for file_lock."""

    def test_creates_lock_file(self, tmp_path):
        lock_path = tmp_path / "test.lock"

        with file_lock(lock_path):
            assert lock_path.exists()

    def test_serializes_holders(self, tmp_path):
        """A second holder waits until the first releases the lock."""
        lock_path = tmp_path / "test.lock"
        order: list[str] = []
        first_holding = threading.Event()

        def first() -> None:
            with file_lock(lock_path):
                first_holding.set()
                time.sleep(0.2)
                order.append("first released")

        thread = threading.Thread(target=first)
        thread.start()
        first_holding.wait(timeout=5)

        with file_lock(lock_path):
            order.append("second acquired")
        thread.join()

        assert order == ["first released", "second acquired"]

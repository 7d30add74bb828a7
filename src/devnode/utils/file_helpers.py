"""Shared file utilities for devnode.

Provides:
- set_secure_permissions: Owner-only file/directory permissions
- atomic_write_text: Write-then-rename so readers never see partial files
- file_lock: Exclusive advisory lock held for the duration of a block
"""

from __future__ import annotations

__all__ = [
    "atomic_write_text",
    "file_lock",
    "set_secure_permissions",
]

import fcntl
import os
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


def set_secure_permissions(path: Path, *, is_directory: bool = False) -> None:
    """Set secure permissions on file or directory.

    Sets permissions to restrict access to owner only:
    - Directory: 0o700 (rwx------)
    - File: 0o600 (rw-------)

    Does nothing on Windows. Silently ignores permission errors
    (some systems don't allow permission changes).

    Args:
        path: Path to file or directory.
        is_directory: If True, use directory permissions (0o700).
    """
    if sys.platform == "win32":
        return

    try:
        mode = 0o700 if is_directory else 0o600
        path.chmod(mode)
    except OSError:
        pass  # Permission changes might fail on some systems


def atomic_write_text(path: Path, content: str, *, prefix: str = ".") -> None:
    """Atomically replace ``path`` with ``content``.

    The temp file is created in the same directory so the final rename
    stays on one filesystem. Its name starts with ``prefix`` so directory
    scanners can tell it apart from real entries.

    Args:
        path: Destination file. Its parent must exist.
        content: Text to write (UTF-8).
        prefix: Temp file name prefix.

    Raises:
        OSError: If the file cannot be written.
    """
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=prefix, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(temp_path, 0o600)
        os.replace(temp_path, path)

    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


@contextmanager
def file_lock(lock_path: Path) -> Iterator[None]:
    """Context manager for exclusive file locking.

    Acquires an exclusive lock on the specified file, creating it if needed.
    The lock is automatically released when exiting the context.

    Args:
        lock_path: Path to the lock file.

    Yields:
        None when lock is acquired.

    Raises:
        OSError: If lock acquisition fails.
    """
    lock_file = open(lock_path, "w")
    try:
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        yield
    finally:
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
        except OSError:
            pass
        lock_file.close()

"""On-disk registry of detached instances.

One JSON file per instance, named by the decimal pid of the detached
process. All operations are scoped to a single file; no cross-file locking
is performed here (name assignment is serialized by the spawner).
"""

from __future__ import annotations

__all__ = [
    "InstanceStore",
    "get_instance_store",
]

import json
from pathlib import Path

from pydantic import ValidationError

from devnode.config import get_instances_dir
from devnode.exceptions import CorruptRecordError
from devnode.instances.models import InstanceRecord
from devnode.utils.file_helpers import atomic_write_text, set_secure_permissions

# Temp files from atomic writes start with this; list_pids() skips them
_TEMP_PREFIX = ".record_"


class InstanceStore:
    """Key-value store of InstanceRecords keyed by pid.

    Args:
        directory: Directory holding the record files. Created (0700) on
            first write.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, pid: int) -> Path:
        """Path of the record file for ``pid``."""
        return self._directory / str(pid)

    def _ensure_directory(self) -> None:
        if not self._directory.exists():
            self._directory.mkdir(parents=True, exist_ok=True)
            set_secure_permissions(self._directory, is_directory=True)

    def put(self, record: InstanceRecord) -> None:
        """Durably write ``record`` under its pid, replacing any existing file.

        Raises:
            OSError: If the record cannot be written.
        """
        self._ensure_directory()
        content = record.model_dump_json(indent=2) + "\n"
        atomic_write_text(self.path_for(record.pid), content, prefix=_TEMP_PREFIX)

    def get(self, pid: int) -> InstanceRecord:
        """Read the record stored for ``pid``.

        Raises:
            FileNotFoundError: If no record exists for ``pid``.
            CorruptRecordError: If the file is not a valid record or its
                ``pid`` field disagrees with the file name.
            OSError: For other read failures.
        """
        raw = self.path_for(pid).read_bytes()

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptRecordError(pid, f"invalid JSON: {e}") from e

        try:
            record = InstanceRecord.model_validate(data)
        except ValidationError as e:
            raise CorruptRecordError(pid, f"invalid record: {e.error_count()} validation error(s)") from e

        if record.pid != pid:
            raise CorruptRecordError(pid, f"record claims pid {record.pid}")

        return record

    def remove(self, pid: int) -> bool:
        """Delete the record for ``pid``.

        Returns:
            True if a record existed and was removed, False otherwise.
        """
        try:
            self.path_for(pid).unlink()
        except FileNotFoundError:
            return False
        return True

    def list_pids(self) -> list[int]:
        """Return the pid of every stored record.

        File names that are not canonical decimal pids (temp files,
        strays, zero-padded names) are ignored. A missing directory means an empty registry.
        """
        if not self._directory.is_dir():
            return []

        pids: list[int] = []
        for entry in self._directory.iterdir():
            name = entry.name
            if name.isascii() and name.isdigit() and name == str(int(name)) and int(name) > 0 and entry.is_file():
                pids.append(int(name))
        return sorted(pids)


def get_instance_store() -> InstanceStore:
    """Get the store for the configured instances directory."""
    return InstanceStore(get_instances_dir())

"""Shared fixtures for devnode tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from devnode.instances.models import InstanceRecord
from devnode.instances.store import InstanceStore

FAKE_CMD = "/usr/bin/python3 -m devnode start ethereum --server.port=8545"


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point devnode's data directory at a temp dir (also for child processes)."""
    directory = tmp_path / "data"
    monkeypatch.setenv("DEVNODE_DATA_DIR", str(directory))
    return directory


@pytest.fixture
def store(data_dir: Path) -> InstanceStore:
    """Instance store inside the temp data directory."""
    return InstanceStore(data_dir / "instances")


@pytest.fixture
def make_record() -> Callable[..., InstanceRecord]:
    """Factory for InstanceRecords with sensible defaults."""

    def _make(**overrides: Any) -> InstanceRecord:
        values: dict[str, Any] = {
            "instance_name": "brave_walrus",
            "pid": 4242,
            "start_time": datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc),
            "host": "127.0.0.1",
            "port": 8545,
            "flavor": "ethereum",
            "cmd": FAKE_CMD,
            "version": "0.1.0",
        }
        values.update(overrides)
        return InstanceRecord(**values)

    return _make


@pytest.fixture
def recent() -> Callable[[int], datetime]:
    """Datetime ``seconds`` ago."""

    def _ago(seconds: int) -> datetime:
        return datetime.now(timezone.utc) - timedelta(seconds=seconds)

    return _ago


class _EventCollector(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.events: list[dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:
        if isinstance(record.msg, dict):
            self.events.append({"level": record.levelname, **record.msg})


@pytest.fixture
def logged_events() -> Iterator[list[dict[str, Any]]]:
    """Structured events logged by devnode.instances during the test."""
    logger = logging.getLogger("devnode.instances")
    collector = _EventCollector()
    logger.addHandler(collector)
    yield collector.events
    logger.removeHandler(collector)

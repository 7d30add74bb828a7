"""Tests for instance logging setup and the JSONL formatter."""

from __future__ import annotations

import json
import logging

import pytest

from devnode.config import DevnodeConfig, get_system_log_path
from devnode.instances import log_config
from devnode.instances.log_config import configure_logging, log_event
from devnode.instances.models import InstanceSystemEvent
from devnode.utils.logging import ISO8601Formatter


@pytest.fixture
def fresh_logger(monkeypatch: pytest.MonkeyPatch):
    """Let configure_logging run again, restoring handlers afterwards."""
    logger = logging.getLogger("devnode.instances")
    saved = list(logger.handlers)
    monkeypatch.setattr(log_config, "_file_handler_configured", False)
    yield logger
    for handler in logger.handlers:
        if handler not in saved:
            handler.close()
    logger.handlers[:] = saved


def _record(msg, level=logging.WARNING) -> logging.LogRecord:
    return logging.LogRecord("devnode.instances", level, __file__, 1, msg, None, None)


class TestISO8601Formatter:
    """Tests for ISO8601Formatter."""

    def test_dict_message_is_merged(self):
        line = ISO8601Formatter().format(_record({"event": "instance_evicted", "pid": 5}))

        data = json.loads(line)
        assert data["event"] == "instance_evicted"
        assert data["pid"] == 5
        assert data["level"] == "WARNING"
        assert data["time"].endswith("Z")

    def test_plain_message(self):
        data = json.loads(ISO8601Formatter().format(_record("plain text")))

        assert data["message"] == "plain text"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_warnings_reach_system_log(self, tmp_path, fresh_logger):
        """Warnings are appended to system.jsonl; debug events are not."""
        config = DevnodeConfig(log_dir=str(tmp_path))
        configure_logging(config, console_level=logging.CRITICAL)

        log_event(logging.DEBUG, InstanceSystemEvent(event="instance_evicted", pid=1))
        log_event(logging.WARNING, InstanceSystemEvent(event="instance_record_corrupt", pid=2, message="bad"))
        for handler in fresh_logger.handlers:
            handler.flush()

        lines = get_system_log_path(config).read_text().splitlines()
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["event"] == "instance_record_corrupt"
        assert entry["pid"] == 2
        assert "instance_name" not in entry

    def test_console_uses_message(self, tmp_path, fresh_logger, capsys):
        """The console shows the human message with its level."""
        configure_logging(DevnodeConfig(log_dir=str(tmp_path)))

        log_event(logging.INFO, InstanceSystemEvent(event="server_started", message="listening"))

        assert "INFO: listening" in capsys.readouterr().err

"""Tests for stopping detached instances."""

from __future__ import annotations

import signal
from unittest.mock import MagicMock

import pytest

from devnode.instances.process import send_termination_signal
from devnode.instances.terminator import stop_detached_instance


@pytest.fixture
def process_table(monkeypatch: pytest.MonkeyPatch) -> dict[int, str]:
    table: dict[int, str] = {}
    monkeypatch.setattr("devnode.instances.discovery.get_process_table", lambda: dict(table))
    return table


@pytest.fixture
def kill_mock(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    mock = MagicMock(return_value=True)
    monkeypatch.setattr("devnode.instances.terminator.send_termination_signal", mock)
    return mock


class TestStopDetachedInstance:
    """Tests for stop_detached_instance."""

    def test_stops_live_instance(self, store, process_table, kill_mock, make_record, logged_events):
        """A live instance is signalled and its record removed."""
        record = make_record(pid=500, instance_name="calm_heron")
        store.put(record)
        process_table[500] = record.cmd

        assert stop_detached_instance("calm_heron", store=store) is True

        kill_mock.assert_called_once_with(500)
        assert store.list_pids() == []
        assert logged_events[-1]["event"] == "instance_stopped"

    def test_unknown_name_changes_nothing(self, store, process_table, kill_mock, make_record):
        """Stopping an unknown name touches neither processes nor records."""
        record = make_record(pid=501, instance_name="calm_heron")
        store.put(record)
        process_table[501] = record.cmd

        assert stop_detached_instance("other_name", store=store) is False

        kill_mock.assert_not_called()
        assert store.list_pids() == [501]

    def test_stale_instance_is_not_signalled(self, store, process_table, kill_mock, make_record):
        """A reused pid is never signalled, even when its record names match."""
        store.put(make_record(pid=502, instance_name="calm_heron"))
        process_table[502] = "/bin/bash"

        assert stop_detached_instance("calm_heron", store=store) is False

        kill_mock.assert_not_called()

    def test_record_removed_when_signal_fails(self, store, process_table, kill_mock, make_record, logged_events):
        """The instance counts as found even if it exited before the signal."""
        kill_mock.return_value = False
        record = make_record(pid=503, instance_name="calm_heron")
        store.put(record)
        process_table[503] = record.cmd

        assert stop_detached_instance("calm_heron", store=store) is True

        assert store.list_pids() == []
        assert logged_events[-1]["event"] == "instance_stop_signal_failed"

    def test_stops_only_the_named_instance(self, store, process_table, kill_mock, make_record):
        """Other instances keep running."""
        for pid, name in ((504, "calm_heron"), (505, "bold_yak")):
            record = make_record(pid=pid, instance_name=name)
            store.put(record)
            process_table[pid] = record.cmd

        stop_detached_instance("bold_yak", store=store)

        kill_mock.assert_called_once_with(505)
        assert store.list_pids() == [504]


class TestSendTerminationSignal:
    """Tests for send_termination_signal."""

    def test_delivers_sigterm(self, monkeypatch):
        """SIGTERM is sent by default."""
        kill = MagicMock()
        monkeypatch.setattr("devnode.instances.process.os.kill", kill)

        assert send_termination_signal(1234) is True
        kill.assert_called_once_with(1234, signal.SIGTERM)

    def test_missing_process_returns_false(self, monkeypatch):
        """A vanished process is reported, not raised."""
        monkeypatch.setattr(
            "devnode.instances.process.os.kill",
            MagicMock(side_effect=ProcessLookupError()),
        )

        assert send_termination_signal(1234) is False

    def test_permission_denied_returns_false(self, monkeypatch):
        """A process we may not signal is reported, not raised."""
        monkeypatch.setattr(
            "devnode.instances.process.os.kill",
            MagicMock(side_effect=PermissionError()),
        )

        assert send_termination_signal(1234) is False

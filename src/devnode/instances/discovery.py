"""Discovery of detached instances.

Reconciles the on-disk registry against the live process table. Every
pass evicts records whose process is gone or whose pid now belongs to an
unrelated process, and returns the rest newest first.
"""

from __future__ import annotations

__all__ = [
    "find_detached_instance",
    "list_detached_instances",
]

import logging

from devnode.exceptions import CorruptRecordError
from devnode.instances.log_config import log_event
from devnode.instances.models import InstanceRecord, InstanceSystemEvent
from devnode.instances.process import get_process_table, send_termination_signal
from devnode.instances.store import InstanceStore, get_instance_store


def _evict(store: InstanceStore, pid: int, reason: str, instance_name: str | None = None) -> None:
    try:
        removed = store.remove(pid)
    except OSError as e:
        log_event(
            logging.WARNING,
            InstanceSystemEvent(
                event="instance_evict_failed",
                message=f"Failed to remove stale instance record (pid {pid}): {e}",
                pid=pid,
                instance_name=instance_name,
                error_type=type(e).__name__,
                error_message=str(e),
                details={"reason": reason},
            ),
        )
        return

    if removed:
        log_event(
            logging.DEBUG,
            InstanceSystemEvent(
                event="instance_evicted",
                message=f"Removed stale instance record (pid {pid}, {reason})",
                pid=pid,
                instance_name=instance_name,
                details={"reason": reason},
            ),
        )


def list_detached_instances(*, store: InstanceStore | None = None) -> list[InstanceRecord]:
    """List running detached instances, newest first.

    Takes one process table snapshot and checks every stored record
    against it:

    - no process with the record's pid: the record is evicted
    - the record cannot be parsed: the process is sent SIGTERM (its
      identity can no longer be trusted) and the record is evicted
    - the process command line differs from the record's ``cmd``: the pid
      was reused, so the record is evicted and the process left alone

    Eviction only ever removes the record file. A record that cannot be
    read for other reasons is evicted without signalling, and a record
    that cannot be removed is logged and skipped; neither fails the pass.

    Args:
        store: Registry to reconcile. Defaults to the configured one.

    Returns:
        Live instances sorted by start_time, most recent first.
    """
    store = store or get_instance_store()
    processes = get_process_table()
    instances: list[InstanceRecord] = []

    for pid in store.list_pids():
        live_cmd = processes.get(pid)
        if live_cmd is None:
            _evict(store, pid, "process_gone")
            continue

        try:
            record = store.get(pid)
        except FileNotFoundError:
            # Removed concurrently (another reader or the instance itself)
            continue
        except CorruptRecordError as e:
            log_event(
                logging.WARNING,
                InstanceSystemEvent(
                    event="instance_record_corrupt",
                    message=f"Instance data corrupted. Process has been killed (PID {pid})",
                    pid=pid,
                    error_type=type(e).__name__,
                    error_message=e.reason,
                ),
            )
            send_termination_signal(pid)
            _evict(store, pid, "corrupt")
            continue
        except OSError as e:
            log_event(
                logging.WARNING,
                InstanceSystemEvent(
                    event="instance_read_failed",
                    message=f"Failed to read instance record (pid {pid}): {e}",
                    pid=pid,
                    error_type=type(e).__name__,
                    error_message=str(e),
                ),
            )
            _evict(store, pid, "unreadable")
            continue

        if live_cmd != record.cmd:
            _evict(store, pid, "pid_reused", record.instance_name)
            continue

        instances.append(record)

    instances.sort(key=lambda instance: instance.start_time, reverse=True)
    return instances


def find_detached_instance(
    instance_name: str,
    *,
    store: InstanceStore | None = None,
) -> InstanceRecord | None:
    """Find a running detached instance by name.

    Returns:
        The matching instance, or None if no live instance has that name.
    """
    for instance in list_detached_instances(store=store):
        if instance.instance_name == instance_name:
            return instance
    return None

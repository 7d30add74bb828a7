"""Stopping detached instances."""

from __future__ import annotations

__all__ = ["stop_detached_instance"]

import logging

from devnode.instances.discovery import find_detached_instance
from devnode.instances.log_config import log_event
from devnode.instances.models import InstanceSystemEvent
from devnode.instances.process import send_termination_signal
from devnode.instances.store import InstanceStore, get_instance_store


def stop_detached_instance(instance_name: str, *, store: InstanceStore | None = None) -> bool:
    """Stop a detached instance by name.

    Sends SIGTERM and removes the instance record whether or not the
    signal was delivered (the process may have exited in the meantime).
    This is a request, not a confirmation that the instance shut down.

    Args:
        instance_name: Name assigned when the instance was started.
        store: Registry to use. Defaults to the configured one.

    Returns:
        True if a live instance with that name was found, False otherwise.
        When False, nothing on disk was changed.
    """
    store = store or get_instance_store()
    instance = find_detached_instance(instance_name, store=store)
    if instance is None:
        return False

    try:
        delivered = send_termination_signal(instance.pid)
    finally:
        store.remove(instance.pid)

    if delivered:
        log_event(
            logging.DEBUG,
            InstanceSystemEvent(
                event="instance_stopped",
                message=f"Sent SIGTERM to instance {instance_name} (pid {instance.pid})",
                pid=instance.pid,
                instance_name=instance_name,
            ),
        )
    else:
        log_event(
            logging.DEBUG,
            InstanceSystemEvent(
                event="instance_stop_signal_failed",
                message=f"Could not signal instance {instance_name} (pid {instance.pid})",
                pid=instance.pid,
                instance_name=instance_name,
            ),
        )
    return True

"""Helpers for the detached process itself.

A process started by start_detached_instance() finds the readiness pipe
descriptor in its environment. It must call notify_detached_instance_ready()
exactly once, after its server is listening, and should remove its own
record when it shuts down normally.
"""

from __future__ import annotations

__all__ = [
    "is_detached_instance",
    "notify_detached_instance_ready",
    "remove_own_instance_record",
]

import os
import sys

from devnode.constants import READY_FD_ENV_VAR, READY_MESSAGE
from devnode.instances.store import InstanceStore, get_instance_store


def is_detached_instance() -> bool:
    """Whether this process was started as a detached instance and has not
    yet announced readiness."""
    return READY_FD_ENV_VAR in os.environ


def _silence_stderr() -> None:
    """Point fd 2 at the null device.

    The parent stops reading our stderr once we are ready. Writing to a pipe
    nobody reads would eventually raise BrokenPipeError.
    """
    sys.stderr.flush()
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, 2)
    finally:
        os.close(devnull)


def notify_detached_instance_ready() -> bool:
    """Tell the spawning process that this instance is ready for requests.

    Writes the ready message to the inherited pipe and closes it. The
    descriptor is removed from the environment so that processes started
    later by this instance do not inherit it.

    Returns:
        True if readiness was announced, False if this process is not a
        detached instance (or has already announced).
    """
    fd_value = os.environ.pop(READY_FD_ENV_VAR, None)
    if fd_value is None:
        return False

    fd = int(fd_value)
    try:
        os.write(fd, READY_MESSAGE)
    finally:
        os.close(fd)

    _silence_stderr()
    return True


def remove_own_instance_record(*, store: InstanceStore | None = None) -> bool:
    """Remove this process's record from the registry.

    Best effort: discovery evicts the record anyway once the process is gone.

    Returns:
        True if a record existed and was removed.
    """
    store = store or get_instance_store()
    try:
        return store.remove(os.getpid())
    except OSError:
        return False

"""Starting detached instances.

The parent launches the server in a new session, forwards the child's
stderr until the child announces readiness over an inherited pipe, then
lets go of the child and records it in the instance registry.

Handshake outcomes:
- ``ready`` arrives on the pipe: the instance is registered and returned
- the child cannot be launched: SpawnFailedError chained to the OSError
- the pipe closes because the child exited: SpawnFailedError with the
  exit status (0 is reported as 1, since exiting before readiness is a
  failure)

There is no timeout: a child that never becomes ready and never exits
blocks the caller.
"""

from __future__ import annotations

__all__ = [
    "START_ERROR",
    "start_detached_instance",
]

import logging
import os
import subprocess
import sys
import threading
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import IO, Any

import psutil

from devnode.constants import (
    DEFAULT_FLAVOR,
    DEFAULT_HOST,
    DEFAULT_PORT,
    INSTANCES_LOCK_FILENAME,
    READY_FD_ENV_VAR,
    READY_MESSAGE,
)
from devnode.exceptions import SpawnFailedError
from devnode.instances.args import flatten_child_args
from devnode.instances.discovery import list_detached_instances
from devnode.instances.log_config import log_event
from devnode.instances.models import InstanceRecord, InstanceSystemEvent
from devnode.instances.names import create_instance_name
from devnode.instances.process import get_command_line
from devnode.instances.store import InstanceStore, get_instance_store
from devnode.utils.file_helpers import file_lock

START_ERROR = "An error occurred spawning a detached instance of devnode:"

# How long to wait for the child's remaining stderr after it exited
STDERR_DRAIN_TIMEOUT_SECONDS = 1.0


def _forward_stderr(stream: IO[bytes], target: IO[str], forwarding: threading.Event) -> None:
    """Copy child stderr lines to ``target`` while ``forwarding`` is set."""
    try:
        for line in iter(stream.readline, b""):
            if forwarding.is_set():
                target.write(line.decode("utf-8", errors="replace"))
                target.flush()
    except (OSError, ValueError):
        pass  # Parent stream closed; nothing left to forward to
    finally:
        stream.close()


def _launch(command: list[str], write_fd: int) -> subprocess.Popen[bytes]:
    env = {**os.environ, READY_FD_ENV_VAR: str(write_fd)}
    return subprocess.Popen(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        pass_fds=(write_fd,),
        start_new_session=True,
        env=env,
    )


def _wait_for_ready(read_fd: int) -> bool:
    """Block until the child sends READY_MESSAGE or closes the pipe."""
    with os.fdopen(read_fd, "rb") as ready_pipe:
        for line in ready_pipe:
            if line == READY_MESSAGE:
                return True
    return False


def _register(
    store: InstanceStore,
    *,
    pid: int,
    cmd: str,
    host: str,
    port: int,
    flavor: str,
    version: str,
) -> InstanceRecord:
    """Assign a unique name and persist the record.

    Runs under an exclusive lock so concurrent starts cannot pick the same
    name between listing the registry and writing the new record.
    """
    lock_dir = store.directory.parent
    lock_dir.mkdir(parents=True, exist_ok=True)

    with file_lock(lock_dir / INSTANCES_LOCK_FILENAME):
        taken = {instance.instance_name for instance in list_detached_instances(store=store)}
        record = InstanceRecord(
            instance_name=create_instance_name(taken),
            pid=pid,
            start_time=datetime.now(timezone.utc),
            host=host,
            port=port,
            flavor=flavor,
            cmd=cmd,
            version=version,
        )
        store.put(record)

    return record


def start_detached_instance(
    executable: Sequence[str],
    config: Mapping[str, Any],
    version: str,
    *,
    store: InstanceStore | None = None,
) -> InstanceRecord:
    """Start a server as a detached instance.

    Args:
        executable: argv prefix of the server program, e.g. ``["devnode"]``
            or ``[sys.executable, "-m", "devnode"]``. The flattened config
            is appended to it.
        config: Nested start configuration. ``server.host`` and
            ``server.port`` are recorded; ``flavor`` selects the variant.
        version: Version of the spawning devnode, recorded for display.
        store: Registry to record the instance in. Defaults to the
            configured one.

    Returns:
        The persisted record of the running, ready instance.

    Raises:
        SpawnFailedError: If the child could not be launched or exited
            before announcing readiness.
    """
    store = store or get_instance_store()
    server = config.get("server") or {}
    host = str(server.get("host", DEFAULT_HOST))
    port = int(server.get("port", DEFAULT_PORT))
    flavor = str(config.get("flavor") or DEFAULT_FLAVOR)

    command = [*executable, *flatten_child_args(config)]

    read_fd, write_fd = os.pipe()
    try:
        child = _launch(command, write_fd)
    except OSError as e:
        os.close(read_fd)
        log_event(
            logging.DEBUG,
            InstanceSystemEvent(
                event="spawn_failed",
                message=f"{START_ERROR}\n{e}",
                error_type=type(e).__name__,
                error_message=str(e),
                details={"command": command},
            ),
        )
        raise SpawnFailedError(f"{START_ERROR}\n{e}") from e
    finally:
        # Only the child may hold the write end, so EOF means it exited
        os.close(write_fd)

    try:
        cmd: str | None = get_command_line(child.pid)
    except psutil.Error:
        cmd = None  # Already gone; the handshake reports why

    assert child.stderr is not None
    forwarding = threading.Event()
    forwarding.set()
    forwarder = threading.Thread(
        target=_forward_stderr,
        args=(child.stderr, sys.stderr, forwarding),
        name=f"devnode-stderr-{child.pid}",
        daemon=True,
    )
    forwarder.start()

    if not _wait_for_ready(read_fd):
        code = child.wait()
        forwarder.join(STDERR_DRAIN_TIMEOUT_SECONDS)
        exit_code = 1 if code == 0 else code
        message = f"{START_ERROR}\nThe detached instance exited with error code: {code}"
        log_event(
            logging.DEBUG,
            InstanceSystemEvent(
                event="spawn_failed",
                message=message,
                pid=child.pid,
                details={"exit_code": code},
            ),
        )
        raise SpawnFailedError(message, exit_code=exit_code)

    # Detach: output after readiness is not ours to show
    forwarding.clear()

    if cmd is None:
        try:
            cmd = get_command_line(child.pid)
        except psutil.Error as e:
            raise SpawnFailedError(
                f"{START_ERROR}\nThe detached instance exited right after becoming ready",
                exit_code=1,
            ) from e

    record = _register(
        store,
        pid=child.pid,
        cmd=cmd,
        host=host,
        port=port,
        flavor=flavor,
        version=version,
    )

    log_event(
        logging.DEBUG,
        InstanceSystemEvent(
            event="instance_started",
            message=f"Started detached instance {record.instance_name} (pid {record.pid})",
            pid=record.pid,
            instance_name=record.instance_name,
            details={"host": host, "port": port, "flavor": flavor},
        ),
    )
    return record

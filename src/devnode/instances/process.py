"""OS process table access and signalling.

Liveness of a detached instance is "claimed alive, verified by command
line": a pid that is alive but now runs a different command line belongs
to an unrelated process that reused the pid.
"""

from __future__ import annotations

__all__ = [
    "format_command_line",
    "get_command_line",
    "get_process_table",
    "send_termination_signal",
]

import os
import signal
from collections.abc import Sequence

import psutil


def format_command_line(cmdline: Sequence[str] | None) -> str:
    """Join argv into the fingerprint string stored in instance records."""
    return " ".join(cmdline or ())


def get_process_table() -> dict[int, str]:
    """Snapshot the live process table.

    Returns:
        Mapping of pid to space-joined command line. Processes whose
        command line cannot be read (zombies, access denied) map to "".
    """
    table: dict[int, str] = {}
    for proc in psutil.process_iter(["pid", "cmdline"]):
        table[proc.info["pid"]] = format_command_line(proc.info["cmdline"])
    return table


def get_command_line(pid: int) -> str:
    """Get the command line of a single process.

    Raises:
        psutil.NoSuchProcess: If the process does not exist.
        psutil.AccessDenied: If the command line cannot be read.
    """
    return format_command_line(psutil.Process(pid).cmdline())


def send_termination_signal(pid: int, sig: int = signal.SIGTERM) -> bool:
    """Ask a process to terminate.

    Args:
        pid: Target process id.
        sig: Signal to send (default SIGTERM, a graceful shutdown request).

    Returns:
        True if the signal was delivered, False if the process was not
        found or could not be signalled.
    """
    try:
        os.kill(pid, sig)
        return True
    except OSError:
        return False

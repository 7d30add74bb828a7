"""Custom exceptions for devnode.

Exceptions are organized by how far they travel:

Surfaced to the caller:
    - SpawnFailedError: A detached instance failed to launch or exited
      before announcing readiness.
    - ConfigurationError: The config file is missing or invalid (strict load).

Handled locally:
    - CorruptRecordError: An instance record on disk could not be parsed.
      Discovery kills the orphaned process and evicts the record.

Usage:
    from devnode.exceptions import SpawnFailedError, CorruptRecordError
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "CorruptRecordError",
    "DevnodeError",
    "SpawnFailedError",
]


class DevnodeError(Exception):
    """Base class for all devnode errors."""


class ConfigurationError(DevnodeError):
    """Raised when configuration cannot be loaded or is invalid."""


class SpawnFailedError(DevnodeError):
    """Raised when a detached instance fails to start.

    Covers both launch-time OS errors (the original OSError is chained as
    ``__cause__``) and children that exit before signalling readiness.

    Attributes:
        exit_code: Non-zero exit status to surface to the user. Always set
            when the child exited; None when it never launched.
    """

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class CorruptRecordError(DevnodeError):
    """Raised when a stored instance record cannot be deserialized.

    Attributes:
        pid: Registry key (file name) of the unreadable record.
        reason: Short description of what was wrong with it.
    """

    def __init__(self, pid: int, reason: str) -> None:
        super().__init__(f"Instance record for pid {pid} is corrupt: {reason}")
        self.pid = pid
        self.reason = reason

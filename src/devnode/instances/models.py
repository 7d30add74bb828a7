"""Pydantic models for detached instances.

Persisted Models:
- InstanceRecord: One detached instance, stored as <instances dir>/<pid>

Logging Models:
- InstanceSystemEvent: System log entries for the instance lifecycle
"""

from __future__ import annotations

__all__ = [
    "InstanceRecord",
    "InstanceSystemEvent",
]

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InstanceRecord(BaseModel):
    """A detached server instance as recorded on disk.

    A record is a claim, not proof: discovery re-checks ``cmd`` against
    the live process table every time the record is read.

    Attributes:
        instance_name: Human-memorable handle used by ``stop``/``list``.
        pid: OS process id of the detached child. Also the file name.
        start_time: When the instance became ready (UTC). Display/sort only.
        host: Address the server was told to bind.
        port: Port the server was told to bind.
        flavor: Server variant. Opaque to the lifecycle code.
        cmd: Command line of ``pid`` at spawn time, space-joined.
        version: Version of the devnode that spawned the instance.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    instance_name: str = Field(min_length=1)
    pid: int = Field(gt=0)
    start_time: datetime
    host: str
    port: int = Field(ge=0, le=65535)
    flavor: str
    cmd: str
    version: str


class InstanceSystemEvent(BaseModel):
    """System log entry for the detached instance lifecycle.

    Used for operational events: spawning, stopping, reconciliation
    evictions, corrupt records.

    Attributes:
        event: Machine-readable event name (e.g., "instance_evicted").
        message: Human-readable message for the console.
        pid: Process id the event concerns.
        instance_name: Instance name, when known.
        error_type: Exception class name, for failures.
        error_message: Exception message, for failures.
        details: Additional structured context.
    """

    event: str
    message: str | None = None
    pid: int | None = None
    instance_name: str | None = None
    error_type: str | None = None
    error_message: str | None = None
    details: dict[str, Any] | None = Field(default=None)

    model_config = ConfigDict(extra="allow")

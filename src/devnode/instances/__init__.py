"""Detached instance lifecycle.

- models.py: InstanceRecord and the lifecycle log event model
- store.py: One-file-per-pid registry of instance records
- names.py: Human-memorable instance names
- args.py: Nested config to child argv (and back)
- process.py: Process table snapshot and termination signal
- spawner.py: Start a detached instance and wait for readiness
- child.py: Readiness announcement and cleanup inside the instance
- discovery.py: Reconcile the registry against live processes
- terminator.py: Stop an instance by name
- formatting.py: Uptime rendering for listings

Usage:
    record = start_detached_instance(["devnode"], config, __version__)
    for instance in list_detached_instances():
        ...
    stop_detached_instance(record.instance_name)
"""

from .args import flatten_child_args, parse_child_args
from .child import (
    is_detached_instance,
    notify_detached_instance_ready,
    remove_own_instance_record,
)
from .discovery import find_detached_instance, list_detached_instances
from .formatting import format_uptime
from .log_config import configure_logging, log_event
from .models import InstanceRecord, InstanceSystemEvent
from .names import create_instance_name
from .process import get_process_table, send_termination_signal
from .spawner import start_detached_instance
from .store import InstanceStore, get_instance_store
from .terminator import stop_detached_instance

__all__ = [
    # Records and storage
    "InstanceRecord",
    "InstanceStore",
    "get_instance_store",
    # Lifecycle
    "find_detached_instance",
    "list_detached_instances",
    "start_detached_instance",
    "stop_detached_instance",
    # Inside the detached process
    "is_detached_instance",
    "notify_detached_instance_ready",
    "remove_own_instance_record",
    # Building blocks
    "create_instance_name",
    "flatten_child_args",
    "format_uptime",
    "get_process_table",
    "parse_child_args",
    "send_termination_signal",
    # Logging
    "InstanceSystemEvent",
    "configure_logging",
    "log_event",
]

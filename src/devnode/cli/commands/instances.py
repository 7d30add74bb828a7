"""Instances command group for devnode CLI.

Provides commands to inspect and control detached instances:
- list: Show running detached instances, newest first
- stop: Stop a detached instance by name
"""

from __future__ import annotations

__all__ = ["instances"]

import json
import sys
from datetime import datetime, timezone

import click

from devnode.instances import (
    InstanceRecord,
    format_uptime,
    list_detached_instances,
    stop_detached_instance,
)

from ..styling import (
    style_dim,
    style_error,
    style_header,
    style_instance_name,
    style_success,
)

_COLUMNS = ("PID", "Name", "Flavor", "Host", "Port", "Uptime")


def _rows(records: list[InstanceRecord], now: datetime) -> list[tuple[str, ...]]:
    return [
        (
            str(record.pid),
            record.instance_name,
            record.flavor,
            record.host,
            str(record.port),
            format_uptime((now - record.start_time).total_seconds()),
        )
        for record in records
    ]


def _echo_table(rows: list[tuple[str, ...]]) -> None:
    """Print rows under _COLUMNS, padding each column to its widest cell."""
    widths = [max(len(cell) for cell in column) for column in zip(_COLUMNS, *rows)]

    click.echo("  ".join(style_header(title.ljust(width)) for title, width in zip(_COLUMNS, widths)).rstrip())
    for row in rows:
        cells = [cell.ljust(width) for cell, width in zip(row, widths)]
        cells[1] = style_instance_name(cells[1])
        click.echo("  ".join(cells).rstrip())


@click.group()
def instances() -> None:
    """Manage detached instances.

    Detached instances are started with `devnode start --detach`.
    """
    pass


@instances.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(as_json: bool) -> None:
    """List running detached instances, newest first."""
    records = list_detached_instances()

    if as_json:
        click.echo(json.dumps([record.model_dump(mode="json") for record in records], indent=2))
        return

    if not records:
        click.echo(style_dim("No detached instances running."))
        return

    _echo_table(_rows(records, datetime.now(timezone.utc)))


@instances.command("stop")
@click.argument("name")
def stop(name: str) -> None:
    """Stop the detached instance called NAME."""
    if stop_detached_instance(name):
        click.echo(style_success("Instance stopped"))
    else:
        click.echo(style_error("Instance not found"), err=True)
        sys.exit(1)

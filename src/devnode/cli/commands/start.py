"""Start command for devnode CLI.

Runs a development chain server in the foreground, or with --detach
starts it as a detached instance and prints the instance name.
"""

from __future__ import annotations

__all__ = ["start"]

import asyncio
import logging
import signal
import sys
from typing import Any, NoReturn

import click

from devnode import __version__
from devnode.config import load_config
from devnode.constants import (
    DEFAULT_CHAIN_ID,
    DEFAULT_FLAVOR,
    DEFAULT_HOST,
    DEFAULT_PORT,
    SUPPORTED_FLAVORS,
)
from devnode.exceptions import SpawnFailedError
from devnode.instances import (
    configure_logging,
    is_detached_instance,
    notify_detached_instance_ready,
    remove_own_instance_record,
    start_detached_instance,
)
from devnode.server import ServerOptions, run_server

from ..styling import style_error, style_instance_name, style_success


def get_devnode_command() -> list[str]:
    """argv that re-invokes this devnode installation."""
    return [sys.executable, "-m", "devnode"]


def _exit_on_sigterm(signum: int, frame: object) -> NoReturn:
    """SIGTERM ends a detached instance normally (exit status 0)."""
    raise SystemExit(0)


@click.command()
@click.argument(
    "flavor",
    required=False,
    default=DEFAULT_FLAVOR,
    type=click.Choice(SUPPORTED_FLAVORS),
)
@click.option(
    "--server.host",
    "host",
    default=DEFAULT_HOST,
    show_default=True,
    help="Address to listen on",
)
@click.option(
    "--server.port",
    "port",
    type=click.IntRange(0, 65535),
    default=DEFAULT_PORT,
    show_default=True,
    help="Port to listen on (0 picks a free port; foreground only)",
)
@click.option(
    "--chain.id",
    "chain_id",
    type=click.IntRange(min=1),
    default=DEFAULT_CHAIN_ID,
    show_default=True,
    help="Chain id reported to clients",
)
@click.option(
    "--detach",
    "-D",
    is_flag=True,
    help="Run in the background and print the instance name",
)
def start(flavor: str, host: str, port: int, chain_id: int, detach: bool) -> None:
    """Start a development chain server.

    With --detach the server keeps running after this command returns.
    Only the instance name is printed, so scripts can capture it:

        name=$(devnode start --detach)
        devnode instances stop "$name"
    """
    if detach:
        if port == 0:
            # The record must carry the port clients will use
            raise click.BadParameter("a detached instance needs a fixed port", param_hint="'--server.port'")
        _start_detached(flavor, host, port, chain_id)
        return

    detached_child = is_detached_instance()
    # Only problems reach a detached parent through forwarded stderr
    configure_logging(load_config(), console_level=logging.WARNING if detached_child else None)

    if detached_child:
        signal.signal(signal.SIGTERM, _exit_on_sigterm)
    else:
        click.echo(f"devnode v{__version__}")

    options = ServerOptions(flavor=flavor, host=host, port=port, chain_id=chain_id)

    def on_ready(bound_port: int) -> None:
        if not notify_detached_instance_ready():
            click.echo(style_success(f"Listening on http://{host}:{bound_port}"))

    try:
        asyncio.run(run_server(options, on_ready=on_ready))
    except KeyboardInterrupt:
        click.echo()
        click.echo("Server stopped.")
    except RuntimeError as e:
        click.echo(style_error(f"Failed to start: {e}"), err=True)
        sys.exit(1)
    finally:
        if detached_child:
            remove_own_instance_record()


def _start_detached(flavor: str, host: str, port: int, chain_id: int) -> None:
    config: dict[str, Any] = {
        "action": "start",
        "flavor": flavor,
        "server": {"host": host, "port": port},
        "chain": {"id": chain_id},
    }

    try:
        instance = start_detached_instance(
            [*get_devnode_command(), "start"],
            config,
            __version__,
        )
    except SpawnFailedError as e:
        click.echo(style_error(e.message), err=True)
        exit_code = e.exit_code if e.exit_code is not None and e.exit_code > 0 else 1
        sys.exit(exit_code)

    click.echo(style_instance_name(instance.instance_name))

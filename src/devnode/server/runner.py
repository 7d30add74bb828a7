"""Serving the development chain application.

The listening socket is bound before uvicorn starts so that bind errors
surface immediately and so that ``on_ready`` only fires once the server is
actually accepting connections. A detached instance uses ``on_ready`` to
announce readiness to the process that spawned it.
"""

from __future__ import annotations

__all__ = ["run_server"]

import asyncio
import errno
import logging
import socket
from collections.abc import Callable

import uvicorn

from devnode.constants import HTTP_LISTEN_BACKLOG, SERVER_SHUTDOWN_TIMEOUT_SECONDS
from devnode.instances.log_config import log_event
from devnode.instances.models import InstanceSystemEvent
from devnode.server.app import ServerOptions, create_server_app

# How often to check whether uvicorn finished starting (seconds)
STARTUP_POLL_INTERVAL_SECONDS = 0.05


def _bind_socket(host: str, port: int) -> socket.socket:
    """Create a listening, non-blocking TCP socket.

    Raises:
        RuntimeError: If the port is already in use.
        OSError: For other bind failures.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        if e.errno == errno.EADDRINUSE:
            raise RuntimeError(
                f"Port {port} is already in use.\n"
                f"Another process is using this port. "
                f"Use --server.port to specify a different port."
            ) from e
        raise
    sock.listen(HTTP_LISTEN_BACKLOG)
    sock.setblocking(False)
    return sock


async def run_server(
    options: ServerOptions,
    *,
    on_ready: Callable[[int], None] | None = None,
) -> None:
    """Serve until shutdown (SIGINT/SIGTERM via uvicorn).

    Args:
        options: What to serve and where.
        on_ready: Called with the bound port once the server accepts
            connections, before any further work.

    Raises:
        RuntimeError: If the port is in use or uvicorn fails to start.
    """
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(logging.CRITICAL)

    sock = _bind_socket(options.host, options.port)
    bound_port = sock.getsockname()[1]

    config = uvicorn.Config(
        create_server_app(options),
        log_config=None,
        ws="none",
        lifespan="off",
        timeout_graceful_shutdown=int(SERVER_SHUTDOWN_TIMEOUT_SECONDS),
    )
    server = uvicorn.Server(config)
    serve_task = asyncio.create_task(server.serve(sockets=[sock]))

    try:
        while not server.started:
            if serve_task.done():
                await serve_task
                raise RuntimeError("Server exited during startup")
            await asyncio.sleep(STARTUP_POLL_INTERVAL_SECONDS)

        log_event(
            logging.INFO,
            InstanceSystemEvent(
                event="server_started",
                message=f"{options.flavor} node listening on {options.host}:{bound_port}",
                details={"host": options.host, "port": bound_port, "flavor": options.flavor},
            ),
        )
        if on_ready is not None:
            on_ready(bound_port)

        await serve_task
    finally:
        if not serve_task.done():
            server.should_exit = True
            try:
                await asyncio.wait_for(serve_task, timeout=SERVER_SHUTDOWN_TIMEOUT_SECONDS)
            except (asyncio.TimeoutError, asyncio.CancelledError):
                serve_task.cancel()
        sock.close()
        log_event(
            logging.INFO,
            InstanceSystemEvent(
                event="server_stopping",
                message="Server has been shut down",
            ),
        )

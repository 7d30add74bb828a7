"""Tests for serving the application on a real socket."""

from __future__ import annotations

import asyncio
import socket

import httpx
import pytest

from devnode.server import ServerOptions, run_server


async def _wait(event: asyncio.Event) -> None:
    await asyncio.wait_for(event.wait(), timeout=10)


class TestRunServer:
    """Tests for run_server."""

    async def test_on_ready_reports_bound_port(self, logged_events):
        """on_ready fires once the server answers requests."""
        ready = asyncio.Event()
        ports: list[int] = []

        def on_ready(port: int) -> None:
            ports.append(port)
            ready.set()

        task = asyncio.create_task(run_server(ServerOptions(port=0), on_ready=on_ready))
        try:
            await _wait(ready)

            assert ports[0] > 0
            async with httpx.AsyncClient() as client:
                response = await client.get(f"http://127.0.0.1:{ports[0]}/health")
            assert response.json()["status"] == "ok"
            assert any(e["event"] == "server_started" for e in logged_events)
        finally:
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert logged_events[-1]["event"] == "server_stopping"

    async def test_port_in_use(self):
        """A taken port fails fast with a readable message."""
        with socket.socket() as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen(1)
            port = taken.getsockname()[1]

            with pytest.raises(RuntimeError, match=f"Port {port} is already in use"):
                await run_server(ServerOptions(port=port))

    async def test_on_ready_not_called_when_bind_fails(self):
        """Readiness is never announced for a server that could not start."""
        calls: list[int] = []
        with socket.socket() as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen(1)

            with pytest.raises(RuntimeError):
                await run_server(ServerOptions(port=taken.getsockname()[1]), on_ready=calls.append)

        assert calls == []

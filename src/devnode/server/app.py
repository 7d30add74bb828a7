"""FastAPI application for the development chain server.

Answers JSON-RPC 2.0 requests on ``POST /`` and reports liveness on
``GET /health``. The chain itself is not simulated: each flavor exposes
the handful of identity methods clients use to detect the node.
"""

from __future__ import annotations

__all__ = [
    "JSONRPC_INVALID_REQUEST",
    "JSONRPC_METHOD_NOT_FOUND",
    "JSONRPC_PARSE_ERROR",
    "ServerOptions",
    "create_server_app",
]

from collections.abc import Callable
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devnode import __version__
from devnode.constants import (
    DEFAULT_CHAIN_ID,
    DEFAULT_FLAVOR,
    DEFAULT_HOST,
    DEFAULT_PORT,
    FILECOIN_FLAVOR,
)

# JSON-RPC 2.0 error codes
JSONRPC_PARSE_ERROR = -32700
JSONRPC_INVALID_REQUEST = -32600
JSONRPC_METHOD_NOT_FOUND = -32601


class ServerOptions(BaseModel):
    """Options for one server run.

    Attributes:
        flavor: Chain variant to serve.
        host: Address to bind.
        port: Port to bind (0 picks a free port).
        chain_id: Chain id reported to clients.
    """

    model_config = ConfigDict(frozen=True)

    flavor: str = DEFAULT_FLAVOR
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    chain_id: int = Field(default=DEFAULT_CHAIN_ID, ge=1)


class JsonRpcRequest(BaseModel):
    """A single JSON-RPC 2.0 request."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    method: str
    params: list[Any] | dict[str, Any] | None = None


def _client_version() -> str:
    return f"devnode/v{__version__}"


def _method_table(options: ServerOptions) -> dict[str, Callable[[], Any]]:
    if options.flavor == FILECOIN_FLAVOR:
        return {
            "Filecoin.Version": lambda: {"Version": _client_version(), "APIVersion": 0},
            "Filecoin.ChainId": lambda: options.chain_id,
        }
    return {
        "web3_clientVersion": _client_version,
        "net_version": lambda: str(options.chain_id),
        "eth_chainId": lambda: hex(options.chain_id),
        "eth_blockNumber": lambda: "0x0",
        "eth_accounts": lambda: [],
    }


def _error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def create_server_app(options: ServerOptions) -> FastAPI:
    """Create the FastAPI application serving ``options.flavor``.

    Args:
        options: Server options. Only flavor and chain id affect responses.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="devnode",
        description=f"Development {options.flavor} node",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.options = options
    methods = _method_table(options)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Liveness probe."""
        return {"status": "ok", "flavor": options.flavor, "version": __version__}

    @app.post("/")
    async def rpc(request: Request) -> JSONResponse:
        """Dispatch a JSON-RPC request."""
        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse(_error(None, JSONRPC_PARSE_ERROR, "Parse error"))

        try:
            call = JsonRpcRequest.model_validate(payload)
        except ValidationError:
            request_id = payload.get("id") if isinstance(payload, dict) else None
            return JSONResponse(_error(request_id, JSONRPC_INVALID_REQUEST, "Invalid Request"))

        handler = methods.get(call.method)
        if handler is None:
            return JSONResponse(
                _error(call.id, JSONRPC_METHOD_NOT_FOUND, f"The method {call.method} does not exist/is not available")
            )

        return JSONResponse({"jsonrpc": "2.0", "id": call.id, "result": handler()})

    return app


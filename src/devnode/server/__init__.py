"""Development chain JSON-RPC server.

- app.py: FastAPI application answering JSON-RPC requests
- runner.py: Binds, serves, and cooperates with the detached lifecycle
"""

from .app import ServerOptions, create_server_app
from .runner import run_server

__all__ = [
    "ServerOptions",
    "create_server_app",
    "run_server",
]

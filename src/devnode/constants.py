"""Application-wide constants for devnode.

Constants that define application behavior.
For user-configurable settings, see config.py.
"""

from pathlib import Path

from platformdirs import user_data_dir

__all__ = [
    # Application identity
    "APP_NAME",
    # Flavors
    "ETHEREUM_FLAVOR",
    "FILECOIN_FLAVOR",
    "DEFAULT_FLAVOR",
    "SUPPORTED_FLAVORS",
    # Server defaults
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_CHAIN_ID",
    "HTTP_LISTEN_BACKLOG",
    "SERVER_SHUTDOWN_TIMEOUT_SECONDS",
    # Detached instances
    "DATA_DIR",
    "DATA_DIR_ENV_VAR",
    "INSTANCES_DIRNAME",
    "INSTANCES_LOCK_FILENAME",
    "READY_FD_ENV_VAR",
    "READY_MESSAGE",
    "ACTION_ARG_KEY",
    "FLAVOR_ARG_KEY",
]

# ============================================================================
# Application Identity
# ============================================================================

APP_NAME: str = "devnode"

# ============================================================================
# Flavors
# ============================================================================
# A flavor selects the chain implementation served by an instance. It is
# passed to a child process as a bare sub-command, not as a flag.

ETHEREUM_FLAVOR: str = "ethereum"
FILECOIN_FLAVOR: str = "filecoin"
DEFAULT_FLAVOR: str = ETHEREUM_FLAVOR
SUPPORTED_FLAVORS: tuple[str, ...] = (ETHEREUM_FLAVOR, FILECOIN_FLAVOR)

# ============================================================================
# Server Defaults
# ============================================================================

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8545
DEFAULT_CHAIN_ID: int = 1337

# Number of pending connections for the pre-bound HTTP socket
HTTP_LISTEN_BACKLOG: int = 100

# Graceful uvicorn shutdown before cancelling the serve task
SERVER_SHUTDOWN_TIMEOUT_SECONDS: float = 5.0

# ============================================================================
# Detached Instances
# ============================================================================
# Each detached instance is described by one file named after its pid in
# <data dir>/instances/. The lock file sits next to (not inside) that
# directory so the directory only ever holds records.
#
# Platform locations (platformdirs.user_data_dir):
#   - macOS: ~/Library/Application Support/devnode
#   - Linux: $XDG_DATA_HOME/devnode (~/.local/share/devnode)
#   - Windows: %LOCALAPPDATA%\devnode

DATA_DIR_ENV_VAR: str = "DEVNODE_DATA_DIR"
DATA_DIR: Path = Path(user_data_dir(APP_NAME))
INSTANCES_DIRNAME: str = "instances"
INSTANCES_LOCK_FILENAME: str = "instances.lock"

# The spawning process hands the child the write end of a pipe and names
# the descriptor in this variable. Its presence marks a detached instance.
READY_FD_ENV_VAR: str = "DEVNODE_READY_FD"
READY_MESSAGE: bytes = b"ready\n"

# Keys of the nested start configuration that never become --key=value flags
ACTION_ARG_KEY: str = "action"
FLAVOR_ARG_KEY: str = "flavor"

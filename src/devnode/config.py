"""User configuration for devnode.

Defines the configuration model and where devnode keeps its files.
Config is stored at the OS-appropriate location (click.get_app_dir).

Example usage:
    # Load from config file (returns defaults if not exists)
    config = load_config()
"""

from __future__ import annotations

__all__ = [
    "DevnodeConfig",
    "get_app_dir",
    "get_config_path",
    "get_data_dir",
    "get_instances_dir",
    "get_log_dir",
    "get_system_log_path",
    "load_config",
    "load_config_strict",
]

import json
import logging
import os
import sys
from pathlib import Path
from typing import Literal

import click
from pydantic import BaseModel, Field, ValidationError

from devnode.constants import (
    APP_NAME,
    DATA_DIR,
    DATA_DIR_ENV_VAR,
    INSTANCES_DIRNAME,
)
from devnode.exceptions import ConfigurationError

_logger = logging.getLogger(f"{APP_NAME}.config")


def _get_platform_log_dir() -> str:
    """Get platform-appropriate base log directory following OS conventions.

    Returns:
        Platform-specific base log directory path (unexpanded).
        devnode logs go in <base>/devnode/.

    Platform conventions:
        - macOS: ~/Library/Logs
        - Linux: ~/.local/state (XDG Base Directory Specification for logs/state)
        - Windows: ~/AppData/Local
    """
    if sys.platform == "darwin":
        return "~/Library/Logs"
    elif sys.platform == "win32":
        return "~/AppData/Local"
    else:
        return os.environ.get("XDG_STATE_HOME", "~/.local/state")


DEFAULT_LOG_DIR = _get_platform_log_dir()


class DevnodeConfig(BaseModel):
    """devnode configuration.

    Attributes:
        log_dir: Base directory for logs. devnode logs are stored in
            <log_dir>/devnode/.
        log_level: Verbosity of console logging.
        data_dir: Overrides the directory holding detached instance
            records. Defaults to the platform user data directory.
    """

    log_dir: str = Field(
        default=DEFAULT_LOG_DIR,
        min_length=1,
        description="Base directory for devnode logs",
    )
    log_level: Literal["INFO", "DEBUG"] = Field(
        default="INFO",
        description="Console log level",
    )
    data_dir: str | None = Field(
        default=None,
        description="Directory for detached instance records",
    )

    model_config = {"extra": "ignore"}  # Ignore unknown fields for forward compat


def get_app_dir() -> Path:
    """Get the OS-appropriate application config directory.

    Uses click.get_app_dir() which returns:
    - macOS: ~/Library/Application Support/devnode
    - Linux: ~/.config/devnode (XDG compliant)
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\devnode
    """
    return Path(click.get_app_dir(APP_NAME))


def get_config_path() -> Path:
    """Get the full path to the config file."""
    return get_app_dir() / "config.json"


def get_log_dir(config: DevnodeConfig) -> Path:
    """Get devnode log directory (<log_dir>/devnode/)."""
    return Path(config.log_dir).expanduser() / APP_NAME


def get_system_log_path(config: DevnodeConfig) -> Path:
    """Get full path to the system log file (<log_dir>/devnode/system.jsonl)."""
    return get_log_dir(config) / "system.jsonl"


def get_data_dir(config: DevnodeConfig | None = None) -> Path:
    """Get the root directory for detached instance state.

    Resolution order: the DEVNODE_DATA_DIR environment variable, then
    ``config.data_dir``, then the platform user data directory.

    Args:
        config: Configuration to consult. Loaded from disk if None.

    Returns:
        Path to the data directory (not created).
    """
    env_dir = os.environ.get(DATA_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir).expanduser()
    if config is None:
        config = load_config()
    if config.data_dir:
        return Path(config.data_dir).expanduser()
    return DATA_DIR


def get_instances_dir(config: DevnodeConfig | None = None) -> Path:
    """Get the directory holding one record file per detached instance."""
    return get_data_dir(config) / INSTANCES_DIRNAME


def load_config() -> DevnodeConfig:
    """Load configuration from file.

    If the config file doesn't exist, returns default configuration.
    Invalid JSON or validation errors return default config with a warning.

    Returns:
        DevnodeConfig: Loaded or default configuration.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return DevnodeConfig()

    try:
        with config_path.open(encoding="utf-8") as f:
            data = json.load(f)
        return DevnodeConfig.model_validate(data)
    except json.JSONDecodeError as e:
        _logger.warning(
            {
                "event": "config_invalid_json",
                "message": f"Invalid JSON in config, using defaults: {e}",
                "error_type": type(e).__name__,
                "error_message": str(e),
                "details": {"config_path": str(config_path)},
            }
        )
        return DevnodeConfig()
    except ValidationError as e:
        _logger.warning(
            {
                "event": "config_validation_failed",
                "message": f"Invalid config values, using defaults: {e}",
                "error_type": type(e).__name__,
                "error_message": str(e),
                "details": {"config_path": str(config_path)},
            }
        )
        return DevnodeConfig()
    except OSError as e:
        _logger.warning(
            {
                "event": "config_read_failed",
                "message": f"Failed to read config file, using defaults: {e}",
                "error_type": type(e).__name__,
                "error_message": str(e),
                "details": {"config_path": str(config_path)},
            }
        )
        return DevnodeConfig()


def load_config_strict() -> DevnodeConfig:
    """Load configuration, raising on any error.

    Unlike load_config(), a missing file is still allowed (defaults apply),
    but unreadable files, invalid JSON and validation errors raise.

    Returns:
        DevnodeConfig: Validated configuration.

    Raises:
        ConfigurationError: If config is unreadable or invalid.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return DevnodeConfig()

    try:
        with config_path.open(encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_path}: {e}") from e

    try:
        return DevnodeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config in {config_path}: {e}") from e

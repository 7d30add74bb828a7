"""Instance lifecycle logging configuration.

Owns the instance logger configuration (handlers, formatters).
Other instance modules log through log_event(); the logger is a
singleton by name so they all share it.
"""

from __future__ import annotations

__all__ = [
    "configure_logging",
    "log_event",
]

import logging

from devnode.config import DevnodeConfig, get_system_log_path
from devnode.constants import APP_NAME
from devnode.instances.models import InstanceSystemEvent
from devnode.utils.logging.iso_formatter import ISO8601Formatter

# Initially stderr only; file handler added via configure_logging()
_logger = logging.getLogger(f"{APP_NAME}.instances")
_logger.setLevel(logging.DEBUG)
_logger.propagate = False

_file_handler_configured: bool = False


class _ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        return f"{record.levelname}: {record.getMessage()}"


def _stderr_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(_ConsoleFormatter())
    return handler


# Warnings only until configured; list/stop output must stay clean
if not _logger.handlers:
    _logger.addHandler(_stderr_handler(logging.WARNING))


def configure_logging(config: DevnodeConfig, *, console_level: int | None = None) -> None:
    """Configure instance logging with console and file handlers.

    Sets up:
    - stderr handler: config.log_level, or ``console_level`` if given
    - file handler: WARNING+ only (issues worth reviewing later)

    Args:
        config: Configuration with log directory and level.
        console_level: Overrides the console level from config.
    """
    global _file_handler_configured

    if _file_handler_configured:
        return

    for handler in _logger.handlers:
        handler.close()
    _logger.handlers.clear()

    if console_level is None:
        console_level = logging.DEBUG if config.log_level == "DEBUG" else logging.INFO
    _logger.addHandler(_stderr_handler(console_level))

    log_path = get_system_log_path(config)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.parent.chmod(0o700)
    except OSError:
        pass  # stderr will still work

    try:
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(ISO8601Formatter())
        _logger.addHandler(file_handler)
        _file_handler_configured = True
    except OSError as e:
        log_event(
            logging.WARNING,
            InstanceSystemEvent(
                event="file_logging_failed",
                message="Failed to configure file logging",
                error_type=type(e).__name__,
                error_message=str(e),
            ),
        )


def log_event(level: int, event: InstanceSystemEvent) -> None:
    """Log an InstanceSystemEvent at the specified level.

    Serializes the event to a dict (excluding None values) and logs it.
    The ISO8601Formatter adds the timestamp during serialization.

    Args:
        level: Logging level (e.g., logging.INFO, logging.WARNING).
        event: The event to log.
    """
    _logger.log(level, event.model_dump(exclude_none=True))

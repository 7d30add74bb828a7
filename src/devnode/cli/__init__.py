"""Command-line interface for devnode.

Provides commands for starting servers (foreground or detached) and for
listing and stopping detached instances.
"""

from .main import cli, main

__all__ = ["cli", "main"]

"""CLI output styling utilities.

Provides consistent styling helpers for CLI output:
- Green for success messages (with checkmark)
- Red for error messages (with cross)
- Yellow for instance names
- Dim for neutral/empty state messages
"""

from __future__ import annotations

__all__ = [
    "style_dim",
    "style_error",
    "style_header",
    "style_instance_name",
    "style_success",
]

import click


def style_header(title: str) -> str:
    """Style a table column header (bold)."""
    return click.style(title, bold=True)


def style_instance_name(name: str) -> str:
    """Highlight an instance name.

    Example:
        >>> click.echo(style_instance_name("brave_walrus"))
        brave_walrus
    """
    return click.style(name, fg="yellow", bold=True)


def style_success(message: str) -> str:
    """Style a success message with checkmark.

    Example:
        >>> click.echo(style_success("Instance stopped"))
        ✓ Instance stopped
    """
    return click.style(f"✓ {message}", fg="green")


def style_error(message: str) -> str:
    """Style an error message with cross mark.

    Example:
        >>> click.echo(style_error("Instance not found"), err=True)
        ✗ Instance not found
    """
    return click.style(f"✗ {message}", fg="red")


def style_dim(message: str) -> str:
    """Style a neutral/empty state message as dim."""
    return click.style(message, dim=True)

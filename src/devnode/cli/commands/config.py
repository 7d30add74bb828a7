"""Config command group for devnode CLI.

Provides configuration inspection subcommands.
"""

from __future__ import annotations

__all__ = ["config"]

import json
import sys

import click

from devnode.config import (
    get_config_path,
    get_instances_dir,
    get_system_log_path,
    load_config_strict,
)
from devnode.exceptions import ConfigurationError

from ..styling import style_error, style_header


@click.group()
def config() -> None:
    """Configuration commands."""
    pass


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Display current configuration and the paths derived from it."""
    try:
        loaded_config = load_config_strict()
    except ConfigurationError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    paths = {
        "config_file": str(get_config_path()),
        "instances_dir": str(get_instances_dir(loaded_config)),
        "system_log": str(get_system_log_path(loaded_config)),
    }

    if as_json:
        click.echo(json.dumps({**loaded_config.model_dump(mode="json"), "_computed": paths}, indent=2))
        return

    click.echo(style_header("Settings"))
    for key, value in loaded_config.model_dump().items():
        click.echo(f"  {key}: {value if value is not None else click.style('(default)', dim=True)}")
    click.echo()
    click.echo(style_header("Paths"))
    for key, value in paths.items():
        click.echo(f"  {key}: {value}")


@config.command("path")
def config_path_cmd() -> None:
    """Show config file path.

    Displays the OS-appropriate config file location:
    - macOS: ~/Library/Application Support/devnode/
    - Linux: ~/.config/devnode/
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\devnode/
    """
    path = get_config_path()
    click.echo(str(path))

    if not path.exists():
        click.echo("(file does not exist - defaults are in use)", err=True)

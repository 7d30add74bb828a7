"""Main CLI entry point for devnode.

Defines the CLI group and registers all subcommands.

Commands:
    config     - Configuration inspection (show, path)
    instances  - Detached instance management (list, stop)
    start      - Start a development chain server (foreground or --detach)

Subcommand help:
    devnode COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli"]

import sys

import click

from devnode import __version__

from .commands.config import config
from .commands.instances import instances
from .commands.start import start


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Quick Start:
  devnode start                       Run a node in this terminal
  devnode start --detach              Run a node in the background
  devnode start filecoin -D           Background node of another flavor
  devnode instances list              Show background nodes
  devnode instances stop <name>       Stop a background node
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """devnode: local development chain servers."""
    if version:
        click.echo(f"devnode {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(config)
cli.add_command(instances)
cli.add_command(start)


def main() -> None:
    """CLI entry point."""
    cli()

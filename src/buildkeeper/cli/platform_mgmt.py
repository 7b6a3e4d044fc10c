"""Platform management commands for buildkeeper CLI.

Provides commands for listing and inspecting platform backends.
"""

import sys

import click

from .main import cli, get_registry


@cli.group()
def platforms() -> None:
    """Inspect platform backends.

    \b
    Commands:
        buildkeeper platforms list
        buildkeeper platforms info <name>
    """
    pass


@platforms.command("list")
def platforms_list() -> None:
    """List available platform backends."""
    registry = get_registry()
    click.echo("Available platforms:")
    for name in registry.list_platforms():
        click.echo(f"  - {name}")


@platforms.command("info")
@click.argument("name")
def platforms_info(name: str) -> None:
    """Show information about a platform backend."""
    registry = get_registry()
    platform_class = registry.get_platform_class(name)

    if platform_class is None:
        click.echo(f"Error: Platform '{name}' not found.")
        sys.exit(1)

    click.echo(f"Platform: {name}")
    click.echo(f"  Class: {platform_class.__name__}")
    click.echo(f"  Module: {platform_class.__module__}")

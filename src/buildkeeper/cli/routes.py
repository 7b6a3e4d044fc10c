"""Route commands for buildkeeper CLI.

Provides the orphan route sweep.
"""

import sys
from typing import Any

import click

from ..builds import OrphanRouteSweeper
from .main import build_platform, cli, cli_errors, platform_options, run_async, with_file_config


@cli.group()
def routes() -> None:
    """Manage routes.

    \b
    Commands:
        buildkeeper routes sweep [--org <org>] [--dry-run]
    """
    pass


@routes.command("sweep")
@platform_options
@click.option("--org", help="Only sweep domains of this organization")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show orphan routes without deleting them")
@click.option("--fail-on-error", is_flag=True, help="Exit non-zero if any deletion failed")
@with_file_config
def routes_sweep(
    file_config: dict[str, Any],
    platform_name: str | None,
    inventory: str | None,
    platform_option: tuple[str, ...],
    org: str | None,
    yes: bool,
    dry_run: bool,
    fail_on_error: bool,
) -> None:
    """Delete every route that is bound to no instance.

    \b
    Examples:
        buildkeeper routes sweep --dry-run
        buildkeeper routes sweep --org acme --yes
    """
    with cli_errors():
        platform = build_platform(platform_name, inventory, platform_option, file_config)
        sweeper = OrphanRouteSweeper(platform)
        orphans = run_async(sweeper.find_orphans(org))

    if not orphans:
        click.echo("No orphan routes found.")
        return

    click.echo("Orphan routes:")
    for route in orphans:
        click.echo(f"  - {route.uri}")

    if dry_run:
        click.echo("(Dry run - no changes made)")
        return

    if not yes and not click.confirm(f"Delete {len(orphans)} route(s)?"):
        click.echo("Aborted.")
        sys.exit(0)

    with cli_errors():
        report = run_async(sweeper.sweep(org))

    click.echo(f"Deleted {len(report.delete_route.succeeded)} route(s)")
    if report.delete_route.failed:
        click.echo("  Errors:")
        for failure in report.delete_route.failed:
            click.echo(f"    - {failure.name}: {failure.error_type}: {failure.reason}")
        if fail_on_error:
            sys.exit(1)

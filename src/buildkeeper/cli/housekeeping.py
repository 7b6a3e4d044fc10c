"""Build housekeeping commands for buildkeeper CLI.

Provides plan, cleanup and instances commands operating on the builds
of one application.
"""

import json
import sys
from typing import Any

import click

from ..builds import BuildHousekeeper, ExecutionReport, RetentionPlan
from .main import (
    build_config,
    build_platform,
    cli,
    cli_errors,
    housekeeping_options,
    platform_options,
    run_async,
    with_file_config,
)


def _make_housekeeper(file_config: dict[str, Any], **options: Any) -> BuildHousekeeper:
    platform = build_platform(
        options.pop("platform_name"),
        options.pop("inventory"),
        options.pop("platform_option"),
        file_config,
    )
    config = build_config(file_config, **options)
    return BuildHousekeeper(platform, config)


def _echo_plan(plan: RetentionPlan) -> None:
    """Print the ranking with the action planned for each build."""
    if not plan.ordered_builds:
        click.echo(f"No builds of '{plan.base_identifier}' found.")
    else:
        doomed = set(plan.to_delete)
        stripped = set(plan.to_strip_urls)
        stopped = set(plan.to_stop)
        click.echo(f"Builds of '{plan.base_identifier}' (newest first):")
        click.echo(f"  {'Build':<8} {'Name':<40} {'Actions'}")
        for build in plan.ordered_builds:
            actions = []
            if build == plan.newest:
                actions.append("primary")
            if build in stripped:
                actions.append("strip-routes")
            if build in doomed:
                actions.append("delete")
            elif build in stopped:
                actions.append("stop")
            if build not in doomed:
                actions.append("keep")
            click.echo(f"  {build.build_number:<8} {build.name:<40} {', '.join(actions)}")

    if plan.rejected:
        click.echo("Rejected names:")
        for rejected in plan.rejected:
            click.echo(f"  - {rejected.name}: {rejected.reason}")


def _echo_report(report: ExecutionReport) -> None:
    click.echo(f"Cleanup complete for {', '.join(report.base_identifiers)}")
    for line in report.summary():
        click.echo(f"  {line}")


# =============================================================================
# Plan Command
# =============================================================================


@cli.command()
@housekeeping_options
@platform_options
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text"
)
@with_file_config
def plan(file_config: dict[str, Any], output_format: str, **options: Any) -> None:
    """Show which builds would be kept, stripped, deleted and stopped.

    \b
    Examples:
        buildkeeper plan --app myapp --inventory inventory.json
        buildkeeper plan --app-name myapp-v1.2-b7 --convention versioned
        buildkeeper plan --config-file buildkeeper.yaml --format json
    """
    with cli_errors():
        housekeeper = _make_housekeeper(file_config, **options)
        retention_plan = run_async(housekeeper.plan())

    if output_format == "json":
        click.echo(retention_plan.model_dump_json(indent=2))
    else:
        _echo_plan(retention_plan)


# =============================================================================
# Cleanup Command
# =============================================================================


@cli.command()
@housekeeping_options
@platform_options
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be changed")
@click.option(
    "--fail-on-error",
    is_flag=True,
    help="Exit non-zero if any platform call failed or a name was rejected",
)
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text"
)
@with_file_config
def cleanup(
    file_config: dict[str, Any],
    yes: bool,
    dry_run: bool,
    fail_on_error: bool,
    output_format: str,
    **options: Any,
) -> None:
    """Delete obsolete builds and move the primary route to the newest build.

    Routes are stripped from retired builds first, then obsolete builds
    are deleted, then (optionally) non-primary builds are stopped.
    Failures of single platform calls are reported, not fatal.

    \b
    Examples:
        buildkeeper cleanup --app myapp --retain 2 --dry-run
        buildkeeper cleanup --app myapp --retain 1 --stop-non-primary --yes
        buildkeeper cleanup --config-file buildkeeper.yaml --yes --fail-on-error
    """
    with cli_errors():
        housekeeper = _make_housekeeper(file_config, **options)
        retention_plan = run_async(housekeeper.plan())

    if output_format == "text":
        _echo_plan(retention_plan)

    if dry_run:
        if output_format == "json":
            click.echo(retention_plan.model_dump_json(indent=2))
        else:
            click.echo("(Dry run - no changes made)")
        return

    if retention_plan.is_empty:
        if output_format == "text":
            click.echo("Nothing to clean up.")
        report = ExecutionReport(base_identifiers=[retention_plan.base_identifier])
    else:
        if not yes and not click.confirm("Apply these changes?"):
            click.echo("Aborted.")
            sys.exit(0)
        report = run_async(housekeeper.apply(retention_plan))

    if output_format == "json":
        click.echo(report.model_dump_json(indent=2))
    else:
        _echo_report(report)

    if fail_on_error and (report.has_failures or retention_plan.rejected):
        sys.exit(1)


# =============================================================================
# Instances Command
# =============================================================================


@cli.command()
@housekeeping_options
@platform_options
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text"
)
@with_file_config
def instances(file_config: dict[str, Any], output_format: str, **options: Any) -> None:
    """List the deployed builds of an application.

    \b
    Examples:
        buildkeeper instances --app myapp
        buildkeeper instances --app myapp --format json
    """
    with cli_errors():
        housekeeper = _make_housekeeper(file_config, **options)
        builds = run_async(housekeeper.list_builds())

    if output_format == "json":
        click.echo(json.dumps([b.model_dump(mode="json") for b in builds], indent=2))
        return

    if not builds:
        click.echo(f"No builds of '{housekeeper.config.base_identifier}' found.")
        return

    click.echo(f"{'Name':<40} {'State':<10} {'URIs'}")
    click.echo("-" * 75)
    for b in builds:
        state = "running" if b.is_running else "stopped"
        click.echo(f"{b.name:<40} {state:<10} {', '.join(sorted(b.uris))}")

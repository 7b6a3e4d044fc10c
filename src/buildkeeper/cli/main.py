"""Main CLI entry point for buildkeeper.

Provides housekeeping commands for CI-built application instances:
    buildkeeper plan --app <base>
    buildkeeper cleanup --app <base> [--dry-run]
    buildkeeper instances --app <base>
    buildkeeper routes sweep [--org <org>]
    buildkeeper platforms list
"""

import asyncio
import functools
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from .. import __version__
from ..builds import (
    BuildkeeperError,
    HousekeepingConfig,
    NameCodec,
    NamingConfig,
    PlatformClient,
    PlatformRegistry,
)
from ..builds.config import env_values, naming_values

# Global registry instance
_registry: PlatformRegistry | None = None

# Keys of a config file that select the platform rather than housekeeping options
_PLATFORM_KEYS = ("platform", "platform_options")


def get_registry() -> PlatformRegistry:
    """Get or create the platform registry."""
    global _registry
    if _registry is None:
        _registry = PlatformRegistry()
        _registry.discover_platforms()
    return _registry


def run_async(coro: Any) -> Any:
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn configuration and planning errors into click errors (exit code 1)."""
    try:
        yield
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from None
    except (BuildkeeperError, ValueError) as e:
        raise click.ClickException(str(e)) from None


def parse_key_values(pairs: tuple[str, ...], option: str) -> dict[str, Any]:
    """Parse key=value pairs, converting ints, floats and booleans."""
    parsed: dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.UsageError(f"Invalid {option} format {pair!r}. Expected key=value")
        k, v = pair.split("=", 1)
        try:
            parsed[k] = int(v)
        except ValueError:
            try:
                parsed[k] = float(v)
            except ValueError:
                if v.lower() in ("true", "false"):
                    parsed[k] = v.lower() == "true"
                else:
                    parsed[k] = v
    return parsed


def load_config_file(config_file: str) -> dict[str, Any]:
    """Load and validate a YAML config file.

    Raises:
        click.ClickException: If file not found or invalid YAML
    """
    path = Path(config_file)
    if not path.exists():
        raise click.ClickException(f"Config file not found: {config_file}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in config file: {e}") from None

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.ClickException("Config file must contain a YAML mapping (dict)")

    return data


def platform_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options selecting and configuring the platform client."""
    decorators = [
        click.option(
            "--platform",
            "platform_name",
            envvar="BUILDKEEPER_PLATFORM",
            help="Platform backend (default: file)",
        ),
        click.option(
            "--inventory",
            type=click.Path(dir_okay=False),
            envvar="BUILDKEEPER_INVENTORY",
            help="Inventory JSON for the file platform",
        ),
        click.option(
            "--platform-option",
            "platform_option",
            multiple=True,
            help="Platform client option in key=value format",
        ),
        click.option(
            "--config-file",
            type=click.Path(exists=False),
            help="YAML config file (CLI flags take precedence)",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def housekeeping_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options describing which builds to keep."""
    decorators = [
        click.option("--app", "-a", "base_identifier", help="Application base identifier"),
        click.option(
            "--app-name",
            help="Full build name of the current deployment; the base identifier is derived",
        ),
        click.option("--retain", "-r", type=int, help="Number of newest builds to keep"),
        click.option(
            "--convention",
            type=click.Choice(["flat", "versioned"]),
            help="Build naming convention",
        ),
        click.option("--infix", help="Regex fragment between base identifier and build number"),
        click.option(
            "--stop-non-primary/--no-stop-non-primary",
            default=None,
            help="Stop every build except the newest",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def build_platform(
    platform_name: str | None,
    inventory: str | None,
    platform_option: tuple[str, ...],
    file_config: dict[str, Any],
) -> PlatformClient:
    """Create the platform client from config file and CLI options."""
    name = platform_name or file_config.get("platform") or "file"
    options: dict[str, Any] = dict(file_config.get("platform_options") or {})
    options.update(parse_key_values(platform_option, "--platform-option"))
    if inventory:
        options["inventory_path"] = inventory
    return get_registry().create(name, **options)


def build_config(
    file_config: dict[str, Any],
    base_identifier: str | None = None,
    app_name: str | None = None,
    retain: int | None = None,
    convention: str | None = None,
    infix: str | None = None,
    stop_non_primary: bool | None = None,
) -> HousekeepingConfig:
    """Merge env, config file and CLI flags, lowest to highest precedence."""
    values: dict[str, Any] = env_values()
    values.update({k: v for k, v in file_config.items() if k not in _PLATFORM_KEYS})

    flags = {
        "base_identifier": base_identifier,
        "builds_to_retain": retain,
        "naming_convention": convention,
        "naming_infix": infix,
        "stop_non_primary_builds": stop_non_primary,
    }
    values.update({k: v for k, v in flags.items() if v is not None})

    file_app_name = values.pop("app_name", None)
    if not app_name and not values.get("base_identifier"):
        app_name = file_app_name
    if app_name and not base_identifier:
        codec = NameCodec(NamingConfig(**naming_values(values)))
        values["base_identifier"] = codec.derive_base(app_name)

    if not values.get("base_identifier"):
        raise click.UsageError(
            "No application given. Use --app, --app-name, a config file "
            "or BUILDKEEPER_BASE_IDENTIFIER."
        )
    return HousekeepingConfig.from_mapping(values)


def with_file_config(func: Callable[..., Any]) -> Callable[..., Any]:
    """Load --config-file and pass its contents as ``file_config``."""

    @functools.wraps(func)
    def wrapper(*args: Any, config_file: str | None = None, **kwargs: Any) -> Any:
        file_config = load_config_file(config_file) if config_file else {}
        return func(*args, file_config=file_config, **kwargs)

    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="buildkeeper")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """buildkeeper - housekeeping for CI-built application instances.

    Deletes obsolete builds, keeps the primary route on the newest build
    and removes orphan routes.

    \b
    Commands:
        buildkeeper plan --app <base>
        buildkeeper cleanup --app <base> [--dry-run]
        buildkeeper instances --app <base>
        buildkeeper routes sweep [--org <org>]
        buildkeeper platforms list
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Main entry point."""
    cli()


# Command modules register themselves on the group
from . import housekeeping, platform_mgmt, routes  # noqa: E402,F401

if __name__ == "__main__":
    main()

"""Configuration models for build housekeeping.

Public API (the "studs"):
    NamingConvention: Supported build naming schemes
    NamingConfig: Naming convention plus regex group names for NameCodec
    HousekeepingConfig: Options consumed by planner, executor and CLI
    env_values: Read options from BUILDKEEPER_* environment variables
    naming_values: Extract naming options from a flat or nested mapping
"""

import os
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Data-driven mapping: config field -> env var
_ENV_MAP: dict[str, str] = {
    "base_identifier": "BUILDKEEPER_BASE_IDENTIFIER",
    "naming_convention": "BUILDKEEPER_NAMING_CONVENTION",
    "naming_infix": "BUILDKEEPER_NAMING_INFIX",
    "builds_to_retain": "BUILDKEEPER_BUILDS_TO_RETAIN",
    "stop_non_primary_builds": "BUILDKEEPER_STOP_NON_PRIMARY",
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class NamingConvention(str, Enum):
    """Build naming schemes. The active one is configured, never auto-detected."""

    FLAT = "flat"  # <base>-b<N>
    VERSIONED = "versioned"  # <base>-v<version>-b<N>


class NamingConfig(BaseModel):
    """Naming convention and the regex group names NameCodec uses.

    Attributes:
        convention: Active naming scheme
        infix: Regex fragment between base identifier and build number,
            overriding the convention's default
        build_group: Regex group name holding the build number
        version_group: Regex group name holding the version segment
    """

    convention: NamingConvention = Field(NamingConvention.FLAT, description="Naming scheme")
    infix: str | None = Field(None, description="Custom infix regex fragment")
    build_group: str = Field("build_number", description="Build number group name")
    version_group: str = Field("version", description="Version group name")

    @field_validator("infix")
    @classmethod
    def validate_infix(cls, v: str | None) -> str | None:
        """Reject empty or uncompilable infix fragments."""
        if v is None:
            return v
        if not v:
            raise ValueError("infix must not be empty")
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"infix is not a valid regex fragment: {e}") from None
        return v

    @field_validator("build_group", "version_group")
    @classmethod
    def validate_group_name(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"regex group name must be an identifier: {v!r}")
        return v

    @property
    def effective_infix(self) -> str:
        """The infix regex fragment in effect for this configuration."""
        if self.infix is not None:
            return self.infix
        if self.convention == NamingConvention.VERSIONED:
            return rf"-v(?P<{self.version_group}>[\w.-]+?)-b"
        return "-b"


class HousekeepingConfig(BaseModel):
    """Options for one application's build housekeeping run.

    Attributes:
        base_identifier: Application name without version and build suffix
        naming: Naming convention configuration
        builds_to_retain: Number of newest builds kept (the newest is always kept)
        stop_non_primary_builds: Stop every build except the newest
    """

    base_identifier: str = Field(..., min_length=1, description="Application base identifier")
    naming: NamingConfig = Field(default_factory=NamingConfig)
    builds_to_retain: int = Field(2, ge=0, description="Number of newest builds to keep")
    stop_non_primary_builds: bool = Field(False, description="Stop all but the newest build")

    @field_validator("base_identifier")
    @classmethod
    def validate_base_identifier(cls, v: str) -> str:
        if v != v.strip():
            raise ValueError(f"base_identifier must not have surrounding whitespace: {v!r}")
        return v

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "HousekeepingConfig":
        """Create a config from a flat mapping (YAML file or env values).

        Accepts either a nested ``naming`` mapping or the flat
        ``naming_convention`` / ``naming_infix`` keys.
        """
        data = dict(data)
        naming = naming_values(data)
        for key in ("naming", "naming_convention", "naming_infix"):
            data.pop(key, None)
        if naming:
            data["naming"] = naming
        return cls(**data)

    @classmethod
    def from_env(cls, **overrides: Any) -> "HousekeepingConfig":
        """Create HousekeepingConfig from environment variables.

        Args:
            overrides: Values taking precedence over the environment

        Returns:
            HousekeepingConfig instance

        Raises:
            ValueError: If a boolean env var is not a recognised value
            pydantic.ValidationError: If the resulting config is invalid
        """
        values = env_values()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_mapping(values)


def env_values() -> dict[str, Any]:
    """Read housekeeping options from environment variables.

    Environment variables:
        BUILDKEEPER_BASE_IDENTIFIER: Application base identifier
        BUILDKEEPER_NAMING_CONVENTION: flat or versioned
        BUILDKEEPER_NAMING_INFIX: Custom infix regex fragment
        BUILDKEEPER_BUILDS_TO_RETAIN: Number of builds to keep
        BUILDKEEPER_STOP_NON_PRIMARY: true/false

    Returns:
        Flat mapping of the variables that are set

    Raises:
        ValueError: If BUILDKEEPER_STOP_NON_PRIMARY is not a recognised boolean
    """
    values: dict[str, Any] = {}
    for field, env_var in _ENV_MAP.items():
        value = os.environ.get(env_var)
        if value is not None:
            values[field] = value

    stop = values.get("stop_non_primary_builds")
    if stop is not None:
        lowered = stop.strip().lower()
        if lowered in _TRUTHY:
            values["stop_non_primary_builds"] = True
        elif lowered in _FALSY:
            values["stop_non_primary_builds"] = False
        else:
            raise ValueError(f"{_ENV_MAP['stop_non_primary_builds']} must be a boolean: {stop!r}")

    return values


def naming_values(data: dict[str, Any]) -> dict[str, Any]:
    """Collect naming options from a nested ``naming`` mapping and the flat keys.

    Flat ``naming_convention`` / ``naming_infix`` keys win over the nested mapping.
    """
    naming: dict[str, Any] = dict(data.get("naming") or {})
    if data.get("naming_convention") is not None:
        naming["convention"] = data["naming_convention"]
    if data.get("naming_infix") is not None:
        naming["infix"] = data["naming_infix"]
    return naming


__all__ = [
    "NamingConvention",
    "NamingConfig",
    "HousekeepingConfig",
    "env_values",
    "naming_values",
]

"""Tests for housekeeping configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from buildkeeper.builds.config import (
    HousekeepingConfig,
    NamingConfig,
    NamingConvention,
    env_values,
    naming_values,
)


class TestNamingConfig:
    """Tests for NamingConfig model."""

    def test_defaults(self):
        config = NamingConfig()
        assert config.convention == NamingConvention.FLAT
        assert config.infix is None
        assert config.effective_infix == "-b"

    def test_versioned_infix_uses_version_group(self):
        config = NamingConfig(convention="versioned", version_group="ver")
        assert "(?P<ver>" in config.effective_infix

    def test_custom_infix_wins(self):
        config = NamingConfig(convention=NamingConvention.VERSIONED, infix="-build")
        assert config.effective_infix == "-build"

    def test_unknown_convention_rejected(self):
        with pytest.raises(ValidationError):
            NamingConfig(convention="calver")


class TestHousekeepingConfig:
    """Tests for HousekeepingConfig model."""

    def test_defaults(self):
        config = HousekeepingConfig(base_identifier="myapp")
        assert config.builds_to_retain == 2
        assert config.stop_non_primary_builds is False
        assert config.naming == NamingConfig()

    def test_base_identifier_required(self):
        with pytest.raises(ValidationError):
            HousekeepingConfig()

    def test_empty_base_identifier_rejected(self):
        with pytest.raises(ValidationError):
            HousekeepingConfig(base_identifier="")

    def test_whitespace_base_identifier_rejected(self):
        with pytest.raises(ValidationError, match="whitespace"):
            HousekeepingConfig(base_identifier=" myapp")

    def test_negative_retain_rejected(self):
        with pytest.raises(ValidationError):
            HousekeepingConfig(base_identifier="myapp", builds_to_retain=-1)

    def test_retain_zero_allowed(self):
        assert HousekeepingConfig(base_identifier="myapp", builds_to_retain=0).builds_to_retain == 0


class TestFromMapping:
    """Tests for HousekeepingConfig.from_mapping."""

    def test_nested_naming(self):
        config = HousekeepingConfig.from_mapping(
            {"base_identifier": "myapp", "naming": {"convention": "versioned"}}
        )
        assert config.naming.convention == NamingConvention.VERSIONED

    def test_flat_naming_keys(self):
        config = HousekeepingConfig.from_mapping(
            {"base_identifier": "myapp", "naming_convention": "versioned", "naming_infix": "-x"}
        )
        assert config.naming.convention == NamingConvention.VERSIONED
        assert config.naming.infix == "-x"

    def test_flat_keys_win_over_nested(self):
        values = naming_values({"naming": {"convention": "flat"}, "naming_convention": "versioned"})
        assert values == {"convention": "versioned"}

    def test_does_not_mutate_input(self):
        data = {"base_identifier": "myapp", "naming_convention": "versioned"}
        HousekeepingConfig.from_mapping(data)
        assert data == {"base_identifier": "myapp", "naming_convention": "versioned"}

    def test_unknown_key_is_ignored(self):
        config = HousekeepingConfig.from_mapping({"base_identifier": "myapp", "color": "blue"})
        assert config.base_identifier == "myapp"


class TestFromEnv:
    """Tests for reading configuration from BUILDKEEPER_* variables."""

    def test_from_env(self):
        env = {
            "BUILDKEEPER_BASE_IDENTIFIER": "myapp",
            "BUILDKEEPER_BUILDS_TO_RETAIN": "3",
            "BUILDKEEPER_NAMING_CONVENTION": "versioned",
            "BUILDKEEPER_STOP_NON_PRIMARY": "yes",
        }
        with patch.dict(os.environ, env):
            config = HousekeepingConfig.from_env()
        assert config.base_identifier == "myapp"
        assert config.builds_to_retain == 3
        assert config.naming.convention == NamingConvention.VERSIONED
        assert config.stop_non_primary_builds is True

    def test_overrides_win(self):
        with patch.dict(os.environ, {"BUILDKEEPER_BASE_IDENTIFIER": "myapp"}):
            config = HousekeepingConfig.from_env(base_identifier="other", builds_to_retain=None)
        assert config.base_identifier == "other"
        assert config.builds_to_retain == 2

    def test_missing_base_identifier(self):
        with pytest.raises(ValidationError):
            HousekeepingConfig.from_env()

    @pytest.mark.parametrize("raw,expected", [("1", True), ("off", False), ("TRUE", True)])
    def test_boolean_parsing(self, raw, expected):
        with patch.dict(os.environ, {"BUILDKEEPER_STOP_NON_PRIMARY": raw}):
            assert env_values()["stop_non_primary_builds"] is expected

    def test_invalid_boolean(self):
        with patch.dict(os.environ, {"BUILDKEEPER_STOP_NON_PRIMARY": "maybe"}):
            with pytest.raises(ValueError, match="BUILDKEEPER_STOP_NON_PRIMARY"):
                env_values()

    def test_unset_variables_absent(self):
        assert env_values() == {}

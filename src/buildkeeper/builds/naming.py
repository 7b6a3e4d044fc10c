"""NameCodec - parses deployed instance names into build identities.

Instance names follow ``<base><infix><build number>``, for example
``myapp-b12`` (flat) or ``myapp-v1.4.0-b12`` (versioned). Build numbers
stand in for deployment timestamps the platform API does not expose, so
they are what orders builds.

Public API (the "studs"):
    NameCodec: Parse, format and classify build names for one naming config
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .config import NamingConfig, NamingConvention
from .exceptions import InvalidBuildName
from .models import BuildIdentity

_Patterns = tuple[re.Pattern[str], re.Pattern[str], re.Pattern[str]]


class NameCodec:
    """Parse and format build names under one naming configuration.

    Matching is anchored on the whole name so a short base identifier never
    claims builds of a longer, unrelated application (``app`` vs ``app-api``).
    Patterns are compiled per base identifier and cached on the instance.
    """

    def __init__(self, config: NamingConfig | None = None) -> None:
        self._config = config or NamingConfig()
        self._cache: dict[str, _Patterns] = {}

    @property
    def config(self) -> NamingConfig:
        return self._config

    def _patterns(self, base_identifier: str) -> _Patterns:
        """Compile (full name, build prefix, secondary uri) patterns for a base."""
        cached = self._cache.get(base_identifier)
        if cached is not None:
            return cached

        base = re.escape(base_identifier)
        infix = self._config.effective_infix
        build = self._config.build_group
        patterns = (
            re.compile(rf"{base}{infix}(?P<{build}>\d+)"),
            # Looks like a build of this app: infix followed by a digit or nothing
            re.compile(rf"{base}{infix}(?=\d|$)"),
            re.compile(rf"{base}{infix}(?P<{build}>\d+)(?:\.|$)"),
        )
        self._cache[base_identifier] = patterns
        return patterns

    def parse(self, name: str, base_identifier: str) -> BuildIdentity | None:
        """Parse an instance name into a BuildIdentity.

        Args:
            name: Instance name as reported by the platform
            base_identifier: Application the build should belong to

        Returns:
            BuildIdentity, or None when the name is not a build of the application

        Raises:
            InvalidBuildName: If the name carries the application's build
                prefix but no trailing build number
        """
        full, prefix, _ = self._patterns(base_identifier)

        match = full.fullmatch(name)
        if match:
            groups = match.groupdict()
            return BuildIdentity(
                base_identifier=base_identifier,
                build_number=int(groups[self._config.build_group]),
                name=name,
                version=groups.get(self._config.version_group),
            )

        if prefix.match(name):
            raise InvalidBuildName(name, base_identifier)

        return None

    def is_build_of(self, name: str, base_identifier: str) -> bool:
        """True if the name is a well-formed build of the application."""
        full, _, _ = self._patterns(base_identifier)
        return full.fullmatch(name) is not None

    def format(self, identity: BuildIdentity) -> str:
        """Reconstruct an instance name for a build identity.

        Raises:
            ValueError: If the configuration uses a custom infix, or the
                versioned convention is active and the identity has no version
        """
        if self._config.infix is not None:
            raise ValueError("Cannot format build names for a custom infix")

        if self._config.convention == NamingConvention.VERSIONED:
            if not identity.version:
                raise ValueError(f"Versioned build name requires a version: {identity!r}")
            return f"{identity.base_identifier}-v{identity.version}-b{identity.build_number}"

        return f"{identity.base_identifier}-b{identity.build_number}"

    def derive_base(self, app_name: str) -> str:
        """Strip the version and build suffix from a full build name.

        ``myapp-v1.2-b7`` becomes ``myapp`` under the versioned convention.

        Raises:
            InvalidBuildName: If the name has no build suffix
        """
        infix = self._config.effective_infix
        match = re.fullmatch(rf"(?P<_base>.+?){infix}\d+", app_name)
        if not match:
            raise InvalidBuildName(app_name)
        return match.group("_base")

    def is_secondary_uri(self, uri: str, base_identifier: str) -> bool:
        """True if the route's host is itself a build name of the application.

        ``myapp-b7.apps.example.com`` is a secondary URI of ``myapp``;
        ``myapp.apps.example.com`` is the primary one.
        """
        _, _, secondary = self._patterns(base_identifier)
        return secondary.match(uri) is not None

    def secondary_uris(self, uris: Iterable[str], base_identifier: str) -> set[str]:
        """Filter URIs down to the secondary ones."""
        return {uri for uri in uris if self.is_secondary_uri(uri, base_identifier)}


__all__ = ["NameCodec"]

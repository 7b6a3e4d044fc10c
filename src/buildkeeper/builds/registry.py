"""Platform Registry - discovers and creates PlatformClient implementations.

The registry is responsible for:
1. Providing the built-in file platform
2. Discovering platform clients shipped by other packages (via entry points)
3. Creating configured client instances for the CLI
"""

from __future__ import annotations

import logging
from typing import Any

from .file_platform import FilePlatform
from .platform import PlatformClient

_logger = logging.getLogger(__name__)


class PlatformRegistry:
    """Registry for discovering and creating platform clients.

    Platform clients can be:
    1. Built in (``file``)
    2. Installed Python packages (discovered via entry points)
    3. Registered programmatically
    """

    # Entry point group for platform discovery
    ENTRY_POINT_GROUP = "buildkeeper.platforms"

    BUILTIN: dict[str, type] = {"file": FilePlatform}

    def __init__(self) -> None:
        self._platforms: dict[str, type] = dict(self.BUILTIN)
        self._discovered = False

    def discover_platforms(self) -> dict[str, type]:
        """Discover installed platform clients via entry points.

        Platform packages register themselves in pyproject.toml:
            [project.entry-points."buildkeeper.platforms"]
            cloudfoundry = "buildkeeper_cf:CloudFoundryPlatform"

        Returns:
            Dict mapping platform names to client classes
        """
        from importlib.metadata import entry_points

        self._discovered = True
        try:
            eps = entry_points(group=self.ENTRY_POINT_GROUP)
        except Exception as e:
            _logger.warning("Failed to discover platforms: %s", e, exc_info=True)
            return self._platforms

        for ep in eps:
            try:
                platform_class = ep.load()
            except Exception as e:
                _logger.warning("Failed to load platform %s: %s", ep.name, e, exc_info=True)
                continue
            if isinstance(platform_class, type):
                self._platforms[ep.name] = platform_class
            else:
                _logger.warning("Entry point %s does not refer to a class, ignoring", ep.name)

        return self._platforms

    def list_platforms(self) -> list[str]:
        """List all available platform names."""
        if not self._discovered:
            self.discover_platforms()
        return sorted(self._platforms)

    def get_platform_class(self, name: str) -> type | None:
        if not self._discovered:
            self.discover_platforms()
        return self._platforms.get(name)

    def create(self, name: str, **options: Any) -> PlatformClient:
        """Create a configured platform client.

        Args:
            name: Platform name
            options: Keyword arguments for the client constructor

        Returns:
            Platform client instance

        Raises:
            ValueError: If the platform is unknown or does not satisfy PlatformClient
        """
        platform_class = self.get_platform_class(name)
        if platform_class is None:
            available = ", ".join(self.list_platforms())
            raise ValueError(f"Unknown platform {name!r}. Available: {available}")

        client = platform_class(**options)
        if not isinstance(client, PlatformClient):
            raise ValueError(f"Platform {name!r} does not implement the PlatformClient protocol")
        return client

    def register_platform(self, name: str, platform_class: type) -> None:
        """Manually register a platform class.

        Useful for testing or programmatic registration.
        """
        self._platforms[name] = platform_class


__all__ = ["PlatformRegistry"]

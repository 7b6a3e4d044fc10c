"""Orphan route sweep - deletes routes no instance is bound to."""

from __future__ import annotations

import logging
import time

from .exceptions import PlatformError
from .models import Route, SweepReport
from .platform import PlatformClient

_logger = logging.getLogger(__name__)


class OrphanRouteSweeper:
    """Find and delete routes with zero bound instances."""

    def __init__(self, platform: PlatformClient) -> None:
        self._platform = platform

    async def find_orphans(self, org_scope: str | None = None) -> list[Route]:
        """Collect orphan routes across every domain of the org."""
        orphans: list[Route] = []
        for domain in await self._platform.fetch_domains(org_scope):
            for route in await self._platform.fetch_routes(domain.name):
                if route.is_orphan:
                    orphans.append(route)
        return orphans

    async def sweep(self, org_scope: str | None = None, dry_run: bool = False) -> SweepReport:
        """Delete every orphan route, recording failures instead of raising."""
        started = time.monotonic()
        report = SweepReport(orphan_routes=await self.find_orphans(org_scope), dry_run=dry_run)

        if not dry_run:
            for route in report.orphan_routes:
                _logger.info("Delete route: %s", route.uri)
                try:
                    await self._platform.delete_route(route.host, route.domain)
                except PlatformError as e:
                    _logger.warning("Failed to delete route %s: %s", route.uri, e)
                    report.record_failure(route, e)
                else:
                    report.record_success(route)

        report.duration_seconds = time.monotonic() - started
        return report


__all__ = ["OrphanRouteSweeper"]

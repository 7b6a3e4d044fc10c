"""PromotionExecutor - applies retention plans against a platform.

Order within one application is fixed: strip routes, then delete, then
stop. Route stripping reads URIs from the plan's pre-deletion snapshot,
never from the platform after a deletion.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Iterable

from .exceptions import NotFoundError, PlatformError
from .models import BuildIdentity, ExecutionReport, OperationKind, RetentionPlan
from .naming import NameCodec
from .platform import PlatformClient

_logger = logging.getLogger(__name__)


class PromotionExecutor:
    """Apply RetentionPlans, recording per-instance outcomes.

    Platform failures are caught once, logged and recorded in the
    ExecutionReport; the batch continues and nothing is retried.
    Exceptions outside the PlatformError hierarchy propagate. Builds
    deleted earlier in the same run are not stopped.
    """

    def __init__(self, platform: PlatformClient, codec: NameCodec | None = None) -> None:
        self._platform = platform
        self._codec = codec or NameCodec()

    async def execute(self, plan: RetentionPlan) -> ExecutionReport:
        """Apply one application's plan.

        Args:
            plan: Plan computed by RetentionPlanner

        Returns:
            ExecutionReport with succeeded and failed targets per operation
        """
        started = time.monotonic()
        report = ExecutionReport(base_identifiers=[plan.base_identifier])

        for build in plan.to_strip_urls:
            await self._strip_routes(plan, build, report)

        for build in plan.to_delete:
            _logger.info("Delete obsolete app: %s", build.name)
            await self._apply(
                OperationKind.DELETE, build.name, self._platform.delete_instance, report
            )

        deleted = set(report.delete.succeeded)
        for build in plan.to_stop:
            if build.name in deleted:
                _logger.debug("Not stopping %s, deleted in this run", build.name)
                continue
            _logger.info("Stop non-primary app: %s", build.name)
            await self._apply(OperationKind.STOP, build.name, self._platform.stop_instance, report)

        report.duration_seconds = time.monotonic() - started
        return report

    async def execute_all(self, plans: Iterable[RetentionPlan]) -> ExecutionReport:
        """Apply several plans one application at a time and merge the reports."""
        merged = ExecutionReport()
        for plan in plans:
            merged.merge(await self.execute(plan))
        return merged

    async def _strip_routes(
        self, plan: RetentionPlan, build: BuildIdentity, report: ExecutionReport
    ) -> None:
        instance = plan.instances.get(build.name)
        current = instance.uris if instance else set()
        secondary = sorted(self._codec.secondary_uris(current, plan.base_identifier))
        _logger.info("Update app URLs: %s -> %s", build.name, secondary)

        async def update(name: str) -> None:
            await self._platform.update_routes(name, secondary)

        await self._apply(OperationKind.STRIP_ROUTES, build.name, update, report)

    async def _apply(
        self,
        kind: OperationKind,
        name: str,
        call: Callable[[str], Awaitable[None]],
        report: ExecutionReport,
    ) -> None:
        try:
            await call(name)
        except NotFoundError as e:
            # Another process got there first
            _logger.info("%s skipped for %s, app might not exist anymore: %s", kind.value, name, e)
            report.record_failure(kind, name, e)
        except PlatformError as e:
            _logger.warning("%s failed for %s: %s", kind.value, name, e)
            report.record_failure(kind, name, e)
        else:
            report.record_success(kind, name)


__all__ = ["PromotionExecutor"]

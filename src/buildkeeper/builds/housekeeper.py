"""BuildHousekeeper - plans and applies build retention for one application.

Collaborators are injected explicitly: the platform client, the
housekeeping configuration and (optionally) a NameCodec sharing that
configuration's naming scheme.
"""

from __future__ import annotations

import logging

from .config import HousekeepingConfig
from .executor import PromotionExecutor
from .models import ExecutionReport, Instance, RetentionPlan
from .naming import NameCodec
from .planner import RetentionPlanner
from .platform import PlatformClient

_logger = logging.getLogger(__name__)


class BuildHousekeeper:
    """Drive one housekeeping run: list, plan, execute.

    Example:
        housekeeper = BuildHousekeeper(platform, HousekeepingConfig(base_identifier="myapp"))
        plan, report = await housekeeper.run()
    """

    def __init__(
        self,
        platform: PlatformClient,
        config: HousekeepingConfig,
        codec: NameCodec | None = None,
    ) -> None:
        self._platform = platform
        self._config = config
        self._codec = codec or NameCodec(config.naming)
        self._planner = RetentionPlanner(self._codec)
        self._executor = PromotionExecutor(platform, self._codec)

    @property
    def config(self) -> HousekeepingConfig:
        return self._config

    async def list_builds(self) -> list[Instance]:
        """List the instances that are well-formed builds of the application."""
        base = self._config.base_identifier
        instances = await self._platform.list_instances(selector=base)
        return [i for i in instances if self._codec.is_build_of(i.name, base)]

    async def plan(self) -> RetentionPlan:
        """Compute a retention plan from the live instance list."""
        base = self._config.base_identifier
        instances = await self._platform.list_instances(selector=base)
        return self._planner.plan(
            instances,
            base,
            self._config.builds_to_retain,
            self._config.stop_non_primary_builds,
        )

    async def apply(self, plan: RetentionPlan) -> ExecutionReport:
        """Apply a plan computed earlier, e.g. after the user confirmed it."""
        return await self._executor.execute(plan)

    async def run(self, dry_run: bool = False) -> tuple[RetentionPlan, ExecutionReport | None]:
        """Plan and, unless dry_run is set, apply the plan.

        Returns:
            The plan and the execution report (None for dry runs and empty plans)
        """
        plan = await self.plan()
        if dry_run:
            _logger.info("Dry run for %s, no changes made", plan.base_identifier)
            return plan, None
        if plan.is_empty:
            _logger.info("Nothing to do for %s", plan.base_identifier)
            return plan, None
        return plan, await self.apply(plan)


__all__ = ["BuildHousekeeper"]

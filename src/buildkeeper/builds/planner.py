"""RetentionPlanner - decides which builds to delete, strip and stop.

Pure and synchronous: the planner only reads the instance list it is
given, so it is safe to run concurrently for different applications.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .exceptions import DuplicateBuildNumber, InvalidBuildName
from .models import BuildIdentity, Instance, RejectedName, RetentionPlan
from .naming import NameCodec

_logger = logging.getLogger(__name__)


class RetentionPlanner:
    """Compute retention plans for the builds of one application.

    Ranking is by build number, newest first. Only the newest build keeps
    the primary route; every other build is stripped down to its secondary
    URIs, whether it is retained or deleted.
    """

    def __init__(self, codec: NameCodec | None = None) -> None:
        self._codec = codec or NameCodec()

    def plan(
        self,
        instances: Iterable[Instance],
        base_identifier: str,
        builds_to_retain: int,
        stop_non_primary: bool = False,
    ) -> RetentionPlan:
        """Build a RetentionPlan from a live instance list.

        Args:
            instances: All instances visible on the platform
            base_identifier: Application whose builds are planned
            builds_to_retain: Number of newest builds to keep; 0 is treated
                as 1 because the newest build is never deleted
            stop_non_primary: Also stop every build except the newest

        Returns:
            RetentionPlan for the application (empty if no builds match)

        Raises:
            ValueError: If builds_to_retain is negative
            DuplicateBuildNumber: If two instances share a build number
        """
        if builds_to_retain < 0:
            raise ValueError(f"builds_to_retain must be >= 0, got {builds_to_retain}")

        builds: list[BuildIdentity] = []
        snapshot: dict[str, Instance] = {}
        rejected: list[RejectedName] = []

        for instance in instances:
            try:
                identity = self._codec.parse(instance.name, base_identifier)
            except InvalidBuildName as e:
                _logger.warning("Skipping %s: %s", instance.name, e)
                rejected.append(RejectedName(name=instance.name, reason=str(e)))
                continue
            if identity is None:
                continue
            builds.append(identity)
            snapshot[instance.name] = instance.model_copy(deep=True)

        ordered = self._rank(builds, base_identifier)
        keep = max(builds_to_retain, 1)
        non_primary = ordered[1:]

        plan = RetentionPlan(
            base_identifier=base_identifier,
            builds_to_retain=builds_to_retain,
            stop_non_primary=stop_non_primary,
            ordered_builds=ordered,
            to_delete=ordered[keep:],
            to_strip_urls=list(non_primary),
            to_stop=list(non_primary) if stop_non_primary else [],
            instances=snapshot,
            rejected=rejected,
        )
        _logger.debug(
            "Planned %s: %d builds, %d to delete, %d to strip, %d to stop",
            base_identifier,
            len(plan.ordered_builds),
            len(plan.to_delete),
            len(plan.to_strip_urls),
            len(plan.to_stop),
        )
        return plan

    @staticmethod
    def _rank(builds: list[BuildIdentity], base_identifier: str) -> list[BuildIdentity]:
        """Sort newest first, refusing to pick between equal build numbers."""
        by_number: dict[int, list[str]] = {}
        for build in builds:
            by_number.setdefault(build.build_number, []).append(build.name)
        for number, names in by_number.items():
            if len(names) > 1:
                raise DuplicateBuildNumber(base_identifier, number, sorted(names))

        return sorted(builds, key=lambda b: b.build_number, reverse=True)


__all__ = ["RetentionPlanner"]

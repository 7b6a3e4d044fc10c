"""Build housekeeping data models.

Models for deployed instances, parsed build identities, retention
plans and the reports produced when a plan is applied.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OperationKind(str, Enum):
    """Mutations issued against the platform."""

    STRIP_ROUTES = "strip_routes"
    DELETE = "delete"
    STOP = "stop"
    DELETE_ROUTE = "delete_route"


class Instance(BaseModel):
    """A deployed application instance as reported by the platform."""

    name: str = Field(..., description="Instance (application) name")
    uris: set[str] = Field(default_factory=set, description="Bound routes as host.domain")
    is_running: bool = Field(default=False, description="Whether the instance is started")


class BuildIdentity(BaseModel):
    """Build identity derived from an instance name.

    Hashable so plans can be compared as sets in tests and by callers.
    """

    model_config = ConfigDict(frozen=True)

    base_identifier: str = Field(..., description="Application the build belongs to")
    build_number: int = Field(..., ge=0, description="Deployment order, higher is newer")
    name: str = Field(..., description="Instance name the identity was parsed from")
    version: str | None = Field(
        default=None, description="Version segment, never used for ordering"
    )


class RejectedName(BaseModel):
    """An instance name that looked like a build but could not be parsed."""

    name: str
    reason: str


class RetentionPlan(BaseModel):
    """Retention and promotion plan for one application.

    All build lists are kept in rank order (newest first). Computed fresh
    from the live instance list on every run and never persisted.
    """

    base_identifier: str
    builds_to_retain: int = Field(..., ge=0)
    stop_non_primary: bool = False
    ordered_builds: list[BuildIdentity] = Field(default_factory=list)
    to_delete: list[BuildIdentity] = Field(default_factory=list)
    to_strip_urls: list[BuildIdentity] = Field(default_factory=list)
    to_stop: list[BuildIdentity] = Field(default_factory=list)
    instances: dict[str, Instance] = Field(
        default_factory=dict, description="Pre-deletion snapshot keyed by instance name"
    )
    rejected: list[RejectedName] = Field(default_factory=list)

    @property
    def newest(self) -> BuildIdentity | None:
        """The primary build, or None when the plan is empty."""
        return self.ordered_builds[0] if self.ordered_builds else None

    @property
    def retained(self) -> list[BuildIdentity]:
        """Builds that survive the deletion step."""
        doomed = set(self.to_delete)
        return [b for b in self.ordered_builds if b not in doomed]

    @property
    def is_empty(self) -> bool:
        """True when applying the plan would not touch the platform."""
        return not (self.to_delete or self.to_strip_urls or self.to_stop)


class OperationFailure(BaseModel):
    """A platform call that failed for one instance or route."""

    name: str = Field(..., description="Instance name or route URI")
    reason: str = Field(..., description="Error message reported by the platform")
    error_type: str = Field(..., description="Exception class name, e.g. NotFoundError")


class OperationOutcome(BaseModel):
    """Succeeded and failed targets of one operation kind."""

    succeeded: list[str] = Field(default_factory=list)
    failed: list[OperationFailure] = Field(default_factory=list)


class ExecutionReport(BaseModel):
    """Report returned after applying a retention plan.

    Platform failures never abort a batch; they end up here so callers
    can decide whether a non-zero failure count should fail a pipeline.
    """

    base_identifiers: list[str] = Field(default_factory=list)
    strip_routes: OperationOutcome = Field(default_factory=OperationOutcome)
    delete: OperationOutcome = Field(default_factory=OperationOutcome)
    stop: OperationOutcome = Field(default_factory=OperationOutcome)
    duration_seconds: float = 0.0

    def outcome(self, kind: OperationKind) -> OperationOutcome:
        """Return the outcome bucket for an operation kind."""
        if kind == OperationKind.DELETE_ROUTE:
            raise ValueError("Route deletions are reported by SweepReport")
        return getattr(self, OperationKind(kind).value)

    def record_success(self, kind: OperationKind, name: str) -> None:
        self.outcome(kind).succeeded.append(name)

    def record_failure(self, kind: OperationKind, name: str, error: Exception) -> None:
        self.outcome(kind).failed.append(
            OperationFailure(name=name, reason=str(error), error_type=type(error).__name__)
        )

    @property
    def success_count(self) -> int:
        return sum(len(o.succeeded) for o in (self.strip_routes, self.delete, self.stop))

    @property
    def failure_count(self) -> int:
        return sum(len(o.failed) for o in (self.strip_routes, self.delete, self.stop))

    @property
    def has_failures(self) -> bool:
        return self.failure_count > 0

    def merge(self, other: "ExecutionReport") -> "ExecutionReport":
        """Fold another group's report into this one and return self."""
        self.base_identifiers.extend(other.base_identifiers)
        for kind in (OperationKind.STRIP_ROUTES, OperationKind.DELETE, OperationKind.STOP):
            mine, theirs = self.outcome(kind), other.outcome(kind)
            mine.succeeded.extend(theirs.succeeded)
            mine.failed.extend(theirs.failed)
        self.duration_seconds += other.duration_seconds
        return self

    def summary(self) -> list[str]:
        """Human-readable summary lines, one per operation kind plus failure reasons."""
        lines = []
        for kind in (OperationKind.STRIP_ROUTES, OperationKind.DELETE, OperationKind.STOP):
            o = self.outcome(kind)
            lines.append(f"{kind.value}: {len(o.succeeded)} succeeded, {len(o.failed)} failed")
            for failure in o.failed:
                lines.append(f"  - {failure.name}: {failure.error_type}: {failure.reason}")
        return lines


class Domain(BaseModel):
    """A platform domain routes are registered under."""

    name: str
    org: str | None = Field(default=None, description="Owning organization, if scoped")


class Route(BaseModel):
    """A route and the number of instances bound to it."""

    host: str
    domain: str
    bound_instance_count: int = Field(default=0, ge=0)

    @property
    def uri(self) -> str:
        return f"{self.host}.{self.domain}"

    @property
    def is_orphan(self) -> bool:
        return self.bound_instance_count == 0


class SweepReport(BaseModel):
    """Report returned after an orphan route sweep."""

    orphan_routes: list[Route] = Field(default_factory=list)
    delete_route: OperationOutcome = Field(default_factory=OperationOutcome)
    dry_run: bool = False
    duration_seconds: float = 0.0

    def record_success(self, route: Route) -> None:
        self.delete_route.succeeded.append(route.uri)

    def record_failure(self, route: Route, error: Exception) -> None:
        self.delete_route.failed.append(
            OperationFailure(name=route.uri, reason=str(error), error_type=type(error).__name__)
        )

    @property
    def has_failures(self) -> bool:
        return bool(self.delete_route.failed)

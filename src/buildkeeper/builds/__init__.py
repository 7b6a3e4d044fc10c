"""Build retention, route promotion and orphan route cleanup.

This module holds the naming codec, the retention planner, the
executor that applies plans and the platform client contract they
run against.
"""

from .config import HousekeepingConfig, NamingConfig, NamingConvention
from .exceptions import (
    BuildkeeperError,
    DuplicateBuildNumber,
    InvalidBuildName,
    InvalidStateError,
    NotFoundError,
    PlatformError,
    RemoteError,
)
from .executor import PromotionExecutor
from .file_platform import FilePlatform
from .housekeeper import BuildHousekeeper
from .models import (
    BuildIdentity,
    Domain,
    ExecutionReport,
    Instance,
    OperationKind,
    RetentionPlan,
    Route,
    SweepReport,
)
from .naming import NameCodec
from .planner import RetentionPlanner
from .platform import PlatformClient
from .registry import PlatformRegistry
from .routes import OrphanRouteSweeper

__all__ = [
    "BuildHousekeeper",
    "BuildIdentity",
    "BuildkeeperError",
    "Domain",
    "DuplicateBuildNumber",
    "ExecutionReport",
    "FilePlatform",
    "HousekeepingConfig",
    "Instance",
    "InvalidBuildName",
    "InvalidStateError",
    "NameCodec",
    "NamingConfig",
    "NamingConvention",
    "NotFoundError",
    "OperationKind",
    "OrphanRouteSweeper",
    "PlatformClient",
    "PlatformError",
    "PlatformRegistry",
    "PromotionExecutor",
    "RemoteError",
    "RetentionPlan",
    "RetentionPlanner",
    "Route",
    "SweepReport",
]

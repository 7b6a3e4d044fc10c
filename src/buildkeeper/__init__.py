"""buildkeeper - housekeeping for CI-built application instances.

buildkeeper keeps a cloud application platform tidy after continuous
delivery: it deletes obsolete builds of an application, moves the
primary route to the newest build and removes routes nothing is bound to.

Key components:
    - NameCodec: Parses build numbers out of instance names
    - RetentionPlanner: Decides which builds to strip, delete and stop
    - PromotionExecutor: Applies a plan, recording per-instance failures
    - PlatformClient: Protocol a platform backend implements
    - CLI: Commands for planning and running housekeeping

Quick start:
    # Preview
    buildkeeper plan --app myapp --retain 2 --inventory inventory.json

    # Apply
    buildkeeper cleanup --app myapp --retain 2 --yes

    # Remove routes bound to no instance
    buildkeeper routes sweep --dry-run
"""

from .builds import (
    BuildHousekeeper,
    HousekeepingConfig,
    NameCodec,
    PlatformClient,
    PromotionExecutor,
    RetentionPlanner,
)

__version__ = "0.1.0"

__all__ = [
    "BuildHousekeeper",
    "HousekeepingConfig",
    "NameCodec",
    "PlatformClient",
    "PromotionExecutor",
    "RetentionPlanner",
    "__version__",
]

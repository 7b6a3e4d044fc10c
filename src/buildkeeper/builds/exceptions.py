"""Exceptions for build housekeeping.

Public API (the "studs"):
    BuildkeeperError: Base exception for all buildkeeper errors
    InvalidBuildName: Name looks like a build but has no trailing build number
    DuplicateBuildNumber: Two builds of one application share a build number
    PlatformError: Base for failures reported by a platform client
    NotFoundError: Instance or route does not exist (anymore)
    InvalidStateError: Instance is not in a state that allows the operation
    RemoteError: Any other platform-side failure
"""


class BuildkeeperError(Exception):
    """Base exception for all buildkeeper errors."""

    pass


class InvalidBuildName(BuildkeeperError):
    """A name matches the build prefix of an application but has no build number.

    This points at a broken deployment naming process upstream and is never
    defaulted to build number 0.
    """

    def __init__(self, name: str, base_identifier: str | None = None) -> None:
        self.name = name
        self.base_identifier = base_identifier
        target = f" for {base_identifier!r}" if base_identifier else ""
        super().__init__(
            f"App name {name!r} is not a supported build name{target}. "
            "A malfunction in the deployment process may have occurred."
        )


class DuplicateBuildNumber(BuildkeeperError):
    """Two instances of the same application parse to the same build number."""

    def __init__(self, base_identifier: str, build_number: int, names: list[str]) -> None:
        self.base_identifier = base_identifier
        self.build_number = build_number
        self.names = names
        super().__init__(
            f"Build number {build_number} of {base_identifier!r} is used by "
            f"more than one instance: {', '.join(names)}"
        )


class PlatformError(BuildkeeperError):
    """Base exception for failures reported by a platform client."""

    pass


class NotFoundError(PlatformError):
    """The instance or route does not exist. Usually removed by another process."""

    pass


class InvalidStateError(PlatformError):
    """The instance is not in a state that allows the operation (e.g. not started)."""

    pass


class RemoteError(PlatformError):
    """Platform-side error that doesn't fit other categories."""

    pass


__all__ = [
    "BuildkeeperError",
    "InvalidBuildName",
    "DuplicateBuildNumber",
    "PlatformError",
    "NotFoundError",
    "InvalidStateError",
    "RemoteError",
]

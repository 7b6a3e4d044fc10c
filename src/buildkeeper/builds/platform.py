"""Platform protocol - defines the capabilities housekeeping expects from a platform.

Public API (the "studs"):
    PlatformClient: Protocol defining platform calls used by buildkeeper
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import Domain, Instance, Route


@runtime_checkable
class PlatformClient(Protocol):
    """Protocol defining the platform calls buildkeeper issues.

    Transport and authentication belong to the implementation. Mutating
    calls report failures with the PlatformError hierarchy
    (NotFoundError, InvalidStateError, RemoteError).

    Implementations must provide all methods defined here.
    """

    async def list_instances(self, selector: str | None = None) -> list[Instance]:
        """List instances, optionally narrowed to names starting with selector."""
        ...

    async def delete_instance(self, name: str) -> None:
        """Delete an instance. Raises NotFoundError or RemoteError."""
        ...

    async def update_routes(self, name: str, uris: Iterable[str]) -> None:
        """Replace an instance's bound URIs.

        Raises NotFoundError, InvalidStateError or RemoteError.
        """
        ...

    async def stop_instance(self, name: str) -> None:
        """Stop (scale to zero) an instance. Raises NotFoundError or RemoteError."""
        ...

    async def fetch_domains(self, org_scope: str | None = None) -> list[Domain]:
        """List domains, optionally for one organization."""
        ...

    async def fetch_routes(self, domain: str) -> list[Route]:
        """List routes registered under a domain."""
        ...

    async def delete_route(self, host: str, domain: str) -> None:
        """Delete a route. Raises NotFoundError or RemoteError."""
        ...


__all__ = ["PlatformClient"]

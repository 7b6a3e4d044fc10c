"""File-based PlatformClient implementation.

Keeps a platform inventory (instances, domains, routes) in a JSON file
on the local filesystem. Useful for rehearsing a housekeeping run
against a snapshot and for tests; it does not talk to a real platform.

Public API (the "studs"):
    FilePlatform: Concrete PlatformClient backed by an inventory file
    Inventory: Model of the inventory file contents
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .exceptions import NotFoundError, RemoteError
from .models import Domain, Instance, Route

_logger = logging.getLogger(__name__)


class StoredRoute(BaseModel):
    """Route as stored in the inventory; bindings are derived from instance URIs."""

    host: str
    domain: str

    @property
    def uri(self) -> str:
        return f"{self.host}.{self.domain}"


class Inventory(BaseModel):
    """Contents of an inventory file."""

    instances: list[Instance] = Field(default_factory=list)
    domains: list[Domain] = Field(default_factory=list)
    routes: list[StoredRoute] = Field(default_factory=list)

    def find_instance(self, name: str) -> Instance:
        for instance in self.instances:
            if instance.name == name:
                return instance
        raise NotFoundError(f"Instance {name!r} not found")

    def bound_count(self, uri: str) -> int:
        return sum(1 for i in self.instances if uri in i.uris)


class FilePlatform:
    """File-based PlatformClient implementation.

    Stores the inventory as JSON in ~/.buildkeeper/inventory.json unless a
    path is given. Every call re-reads the file and every mutation writes
    it back, so concurrent edits by hand are picked up between calls.

    Missing instances and routes raise NotFoundError; a missing or
    unreadable inventory raises RemoteError.
    """

    def __init__(self, inventory_path: Path | str | None = None) -> None:
        """Initialize FilePlatform.

        Args:
            inventory_path: Inventory JSON file. Defaults to ~/.buildkeeper/inventory.json
        """
        if inventory_path is None:
            inventory_path = Path.home() / ".buildkeeper" / "inventory.json"
        self._path = Path(inventory_path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Inventory:
        if not self._path.exists():
            raise RemoteError(f"Inventory file not found: {self._path}")
        try:
            return Inventory.model_validate_json(self._path.read_text())
        except (OSError, ValidationError) as e:
            raise RemoteError(f"Failed to read inventory {self._path}: {e}") from e

    def _save(self, inventory: Inventory) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(inventory.model_dump_json(indent=2))
        except OSError as e:
            raise RemoteError(f"Failed to write inventory {self._path}: {e}") from e
        _logger.debug("Saved inventory to %s", self._path)

    async def list_instances(self, selector: str | None = None) -> list[Instance]:
        instances = self._load().instances
        if selector:
            instances = [i for i in instances if i.name.startswith(selector)]
        return instances

    async def delete_instance(self, name: str) -> None:
        inventory = self._load()
        instance = inventory.find_instance(name)
        inventory.instances.remove(instance)
        self._save(inventory)

    async def update_routes(self, name: str, uris: Iterable[str]) -> None:
        inventory = self._load()
        instance = inventory.find_instance(name)
        instance.uris = set(uris)

        # Register routes for known domains, as pushing a URI would on the platform
        known = {r.uri for r in inventory.routes}
        domains = sorted((d.name for d in inventory.domains), key=len, reverse=True)
        for uri in sorted(instance.uris - known):
            for domain in domains:
                if uri.endswith(f".{domain}"):
                    host = uri[: -len(domain) - 1]
                    inventory.routes.append(StoredRoute(host=host, domain=domain))
                    break
        self._save(inventory)

    async def stop_instance(self, name: str) -> None:
        inventory = self._load()
        inventory.find_instance(name).is_running = False
        self._save(inventory)

    async def fetch_domains(self, org_scope: str | None = None) -> list[Domain]:
        domains = self._load().domains
        if org_scope:
            domains = [d for d in domains if d.org in (None, org_scope)]
        return domains

    async def fetch_routes(self, domain: str) -> list[Route]:
        inventory = self._load()
        return [
            Route(host=r.host, domain=r.domain, bound_instance_count=inventory.bound_count(r.uri))
            for r in inventory.routes
            if r.domain == domain
        ]

    async def delete_route(self, host: str, domain: str) -> None:
        inventory = self._load()
        for route in inventory.routes:
            if route.host == host and route.domain == domain:
                inventory.routes.remove(route)
                self._save(inventory)
                return
        raise NotFoundError(f"Route {host}.{domain} not found")


__all__ = ["FilePlatform", "Inventory"]

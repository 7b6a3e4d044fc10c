"""Shared test fixtures."""

import pytest

from buildkeeper.builds.exceptions import NotFoundError
from buildkeeper.builds.models import Domain, Instance, Route


class InMemoryPlatform:
    """PlatformClient fake that records every call in order.

    ``failures`` maps (method, name) to an exception raised for that call.
    """

    def __init__(self, instances=None, domains=None, routes=None):
        self.instances = {i.name: i for i in (instances or [])}
        self.domains = list(domains or [])
        self.routes = list(routes or [])
        self.failures = {}
        self.calls = []

    def fail(self, method, name, error):
        self.failures[(method, name)] = error

    def _check(self, method, name):
        self.calls.append((method, name))
        error = self.failures.get((method, name))
        if error is not None:
            raise error

    async def list_instances(self, selector=None):
        return [
            i.model_copy(deep=True)
            for i in self.instances.values()
            if not selector or i.name.startswith(selector)
        ]

    async def delete_instance(self, name):
        self._check("delete_instance", name)
        if name not in self.instances:
            raise NotFoundError(f"Instance {name!r} not found")
        del self.instances[name]

    async def update_routes(self, name, uris):
        self._check("update_routes", name)
        if name not in self.instances:
            raise NotFoundError(f"Instance {name!r} not found")
        self.instances[name].uris = set(uris)

    async def stop_instance(self, name):
        self._check("stop_instance", name)
        if name not in self.instances:
            raise NotFoundError(f"Instance {name!r} not found")
        self.instances[name].is_running = False

    async def fetch_domains(self, org_scope=None):
        return [d for d in self.domains if not org_scope or d.org == org_scope]

    async def fetch_routes(self, domain):
        return [r for r in self.routes if r.domain == domain]

    async def delete_route(self, host, domain):
        self._check("delete_route", f"{host}.{domain}")
        for route in self.routes:
            if route.host == host and route.domain == domain:
                self.routes.remove(route)
                return
        raise NotFoundError(f"Route {host}.{domain} not found")


def make_instances(*names, domain="apps.example.com", base="myapp"):
    """Build running instances, each bound to its own route plus the primary one."""
    return [
        Instance(name=n, uris={f"{n}.{domain}", f"{base}.{domain}"}, is_running=True)
        for n in names
    ]


@pytest.fixture()
def platform_factory():
    """Create InMemoryPlatform instances."""

    def _factory(instances=None, domains=None, routes=None):
        return InMemoryPlatform(instances=instances, domains=domains, routes=routes)

    return _factory


@pytest.fixture(name="make_instances")
def make_instances_fixture():
    """Expose make_instances to tests."""
    return make_instances


@pytest.fixture()
def three_builds():
    return make_instances("myapp-b1", "myapp-b2", "myapp-b3")


@pytest.fixture()
def route_platform(platform_factory):
    """Platform with one orphan and one bound route."""
    return platform_factory(
        domains=[Domain(name="example.com", org="acme")],
        routes=[
            Route(host="a", domain="example.com", bound_instance_count=0),
            Route(host="b", domain="example.com", bound_instance_count=3),
        ],
    )


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Keep BUILDKEEPER_* variables and the CLI registry cache out of tests."""
    import os

    from buildkeeper.cli import main

    for key in list(os.environ):
        if key.startswith("BUILDKEEPER_"):
            monkeypatch.delenv(key)
    main._registry = None
    yield
    main._registry = None

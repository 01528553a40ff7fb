"""Shared fixtures for the environment operator test suite."""

from __future__ import annotations

import pytest

from env_operator.models import Color, DeploymentMethod, ResourceKind
from env_operator.models.environment import Environment, Gists
from env_operator.models.service import (
    BlueGreenSettings,
    ContainerLimits,
    ContainerRequests,
    DeploymentSettings,
    Service,
    Services,
)


# ---------------------------------------------------------------------------
# Cluster doubles
# ---------------------------------------------------------------------------


class FakeClusterClient:
    """Records deletions; objects listed in ``present`` exist."""

    def __init__(self, present=(), missing=(), failing=()):
        self.present = set(present)
        self.missing = set(missing)
        self.failing = set(failing)
        self.deleted: list[tuple[ResourceKind, str]] = []
        self.type_names: dict[tuple[ResourceKind, str], str] = {}

    def delete(self, kind, name, namespace, type_name=""):
        if (kind, name) in self.failing:
            raise RuntimeError(f"cannot delete {kind.value} {name}")
        if (kind, name) in self.missing:
            return False
        self.deleted.append((kind, name))
        if type_name:
            self.type_names[(kind, name)] = type_name
        return True

    def exists(self, kind, name, namespace, type_name=""):
        return (kind, name) in self.present

    def external_secret_exists(self, namespace, name):
        return (ResourceKind.EXTERNAL_SECRET, name) in self.present


class StaticSource:
    def __init__(self, env: Environment):
        self.env = env
        self.namespaces: list[str] = []

    def load_environment(self, namespace: str) -> Environment:
        self.namespaces.append(namespace)
        return self.env


class FailingSource:
    def load_environment(self, namespace: str) -> Environment:
        raise ConnectionError("cluster unreachable")


@pytest.fixture
def cluster_client():
    """Factory for fake cluster clients."""
    return FakeClusterClient


@pytest.fixture
def static_source():
    return StaticSource


@pytest.fixture
def failing_source() -> FailingSource:
    return FailingSource()


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


def bluegreen_parent(name: str = "svc", active: Color | None = Color.BLUE, **kwargs) -> Service:
    return Service(
        name=name,
        deployment=DeploymentSettings(
            method=DeploymentMethod.BLUE_GREEN,
            blue_green=BlueGreenSettings(active=active) if active else None,
        ),
        **kwargs,
    )


@pytest.fixture
def make_parent():
    return bluegreen_parent


@pytest.fixture
def web_service() -> Service:
    """A deployed rolling-upgrade service."""
    return Service(
        name="web",
        version="1.0",
        application="web-app",
        replicas=2,
        ports=[80],
        requests=ContainerRequests(cpu="100m", memory="128Mi"),
        limits=ContainerLimits(cpu="1", memory="512Mi"),
        annotations={"team": "core"},
    )


@pytest.fixture
def make_env():
    def _make(*services: Service, namespace: str = "sample", gists=()) -> Environment:
        return Environment(
            name="env",
            namespace=namespace,
            services=Services(services),
            gists=Gists(gists),
        )
    return _make

"""Environment model: the unit the operator reconciles."""

from __future__ import annotations

from dataclasses import dataclass, field

from env_operator.models.service import DeploymentSettings, Service, Services


@dataclass
class Gist:
    """A resource imported from files rather than declared as a service."""

    name: str = ""
    type: str = ""
    path: str = ""
    files: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> Gist:
        return cls(
            name=d.get("name", ""),
            type=d.get("type", ""),
            path=d.get("path", ""),
            files=list(d.get("files") or []),
        )


class Gists(list):
    def find_by_name(self, name: str, gist_type: str) -> Gist | None:
        for i in range(len(self)):
            if self[i].type == gist_type and self[i].name == name:
                return self[i]
        return None

    def find_by_type(self, gist_type: str) -> Gists:
        return Gists(g for g in self if g.type == gist_type)

    def names(self) -> set[str]:
        return {g.name for g in self}


@dataclass
class Test:
    """Kept for config compatibility; not used when reconciling."""

    name: str = ""
    repository: str = ""
    branch: str = ""
    commands: list[dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> Test:
        return cls(
            name=d.get("name", ""),
            repository=d.get("repository", ""),
            branch=d.get("branch", ""),
            commands=[dict(c) for c in d.get("commands") or []],
        )


@dataclass
class Environment:
    name: str = ""
    namespace: str = ""
    deployment: DeploymentSettings | None = None
    services: Services | None = field(default_factory=Services)
    tests: list[Test] = field(default_factory=list)
    gists: Gists = field(default_factory=Gists)

    @classmethod
    def from_dict(cls, d: dict) -> Environment:
        deployment = d.get("deployment")
        services = Services(Service.from_dict(s) for s in d.get("services") or [])
        services.sort(key=lambda s: s.name)
        return cls(
            name=d.get("name", ""),
            namespace=d.get("namespace", ""),
            deployment=DeploymentSettings.from_dict(deployment) if deployment else None,
            services=services,
            tests=[Test.from_dict(t) for t in d.get("tests") or []],
            gists=Gists(Gist.from_dict(g) for g in d.get("gists") or []),
        )

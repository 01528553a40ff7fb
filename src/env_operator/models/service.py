"""Service models: one deployable unit of an environment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from env_operator.models import Color, DeploymentMethod, ResourceKind


def _text(value: Any, key: str) -> str:
    """Read a field whose written form matters, such as a version.

    Floats and booleans have already lost that form (``1.10`` reads as
    ``1.1``, ``yes`` as ``True``), so they are rejected.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"{key} must be a quoted string, got {value!r}")


@dataclass
class BlueGreenSettings:
    # set on a parent: which colour serves traffic
    active: Color | None = None
    # set on a child: which colour this copy is
    deployment_colour: Color | None = None
    # set on a child: whether this copy currently serves traffic
    active_flag: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> BlueGreenSettings:
        return cls(
            active=Color.from_str(d.get("active")),
            deployment_colour=Color.from_str(d.get("deployment_colour")),
            active_flag=bool(d.get("active_flag", False)),
        )


@dataclass
class DeploymentSettings:
    method: str = DeploymentMethod.ROLLING_UPGRADE
    mode: str = ""
    blue_green: BlueGreenSettings | None = None
    custom_urls: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> DeploymentSettings:
        blue_green = None
        if d.get("blue_green"):
            blue_green = BlueGreenSettings.from_dict(d["blue_green"])
        elif d.get("active") is not None:
            # "active" may be given directly in the deployment block
            blue_green = BlueGreenSettings(active=Color.from_str(d["active"]))
        return cls(
            method=d.get("method") or DeploymentMethod.ROLLING_UPGRADE,
            mode=d.get("mode", ""),
            blue_green=blue_green,
            custom_urls={k: list(v or []) for k, v in (d.get("custom_urls") or {}).items()},
        )


@dataclass
class Metric:
    name: str = ""
    target_average_value: str = ""
    target_average_utilization: int = 0

    @classmethod
    def from_dict(cls, d: dict) -> Metric:
        return cls(
            name=d.get("name", ""),
            target_average_value=d.get("target_average_value", ""),
            target_average_utilization=d.get("target_average_utilization", 0),
        )


@dataclass
class HorizontalPodAutoscaler:
    min_replicas: int = 0
    max_replicas: int = 0
    metric: Metric = field(default_factory=Metric)

    @property
    def is_active(self) -> bool:
        return self.min_replicas != 0

    @classmethod
    def from_dict(cls, d: dict) -> HorizontalPodAutoscaler:
        return cls(
            min_replicas=d.get("min_replicas", 0),
            max_replicas=d.get("max_replicas", 0),
            metric=Metric.from_dict(d.get("metric") or {}),
        )


@dataclass
class ContainerRequests:
    cpu: str = ""
    memory: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> ContainerRequests:
        return cls(cpu=str(d.get("cpu", "")), memory=str(d.get("memory", "")))


@dataclass
class ContainerLimits:
    cpu: str = ""
    memory: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> ContainerLimits:
        return cls(cpu=str(d.get("cpu", "")), memory=str(d.get("memory", "")))


@dataclass
class HTTPHeader:
    name: str = ""
    value: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> HTTPHeader:
        return cls(name=d.get("name", ""), value=_text(d.get("value"), "header value"))


@dataclass
class HTTPGetAction:
    path: str = ""
    port: int = 0
    host: str = ""
    scheme: str = ""
    http_headers: list[HTTPHeader] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> HTTPGetAction:
        return cls(
            path=d.get("path", ""),
            port=d.get("port", 0),
            host=d.get("host", ""),
            scheme=d.get("scheme", ""),
            http_headers=[
                HTTPHeader.from_dict(h) for h in d.get("http_headers") or []
            ],
        )


@dataclass
class Probe:
    exec_command: list[str] = field(default_factory=list)
    http_get: HTTPGetAction | None = None
    tcp_port: int = 0
    initial_delay_seconds: int = 0
    timeout_seconds: int = 0
    period_seconds: int = 0
    success_threshold: int = 0
    failure_threshold: int = 0

    @classmethod
    def from_dict(cls, d: dict) -> Probe:
        http_get = d.get("http_get")
        return cls(
            exec_command=list(d.get("exec_command") or []),
            http_get=HTTPGetAction.from_dict(http_get) if http_get else None,
            tcp_port=d.get("tcp_port", 0),
            initial_delay_seconds=d.get("initial_delay_seconds", 0),
            timeout_seconds=d.get("timeout_seconds", 0),
            period_seconds=d.get("period_seconds", 0),
            success_threshold=d.get("success_threshold", 0),
            failure_threshold=d.get("failure_threshold", 0),
        )


@dataclass
class HealthCheck:
    command: list[str] = field(default_factory=list)
    initial_delay: int = 0
    timeout: int = 0

    @classmethod
    def from_dict(cls, d: dict) -> HealthCheck:
        return cls(
            command=list(d.get("command") or []),
            initial_delay=d.get("initial_delay", 0),
            timeout=d.get("timeout", 0),
        )


@dataclass
class EnvVar:
    name: str = ""
    value: str = ""
    secret: str = ""
    pod_field: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> EnvVar:
        return cls(
            name=d.get("name", ""),
            value=_text(d.get("value"), f"env var {d.get('name', '')!r} value"),
            secret=d.get("secret", ""),
            pod_field=d.get("pod_field", ""),
        )


@dataclass
class Volume:
    name: str = ""
    path: str = ""
    modes: str = ""
    size: str = ""
    type: str = ""

    def is_secret_volume(self) -> bool:
        return self.type.lower() == "secret"

    def is_config_map_volume(self) -> bool:
        return self.type.lower() == "configmap"

    @classmethod
    def from_dict(cls, d: dict) -> Volume:
        return cls(
            name=d.get("name", ""),
            path=d.get("path", ""),
            modes=d.get("modes", ""),
            size=d.get("size", ""),
            type=d.get("type", ""),
        )


@dataclass
class ServiceStatus:
    """Observed-only replica counters, filled from the cluster."""

    deployed_at: str = ""
    available_replicas: int = 0
    desired_replicas: int = 0
    current_replicas: int = 0

    @classmethod
    def from_dict(cls, d: dict) -> ServiceStatus:
        return cls(
            deployed_at=d.get("deployed_at", ""),
            available_replicas=d.get("available_replicas", 0),
            desired_replicas=d.get("desired_replicas", 0),
            current_replicas=d.get("current_replicas", 0),
        )


@dataclass(frozen=True)
class OwnedResource:
    kind: ResourceKind
    name: str
    type_name: str = ""


class ServiceKind:
    """What a service turns into on the cluster."""

    is_deployable = True

    def owned_resources(self, service: Service) -> list[OwnedResource]:
        """Cluster objects to remove when the service is no longer declared."""
        resources = [
            OwnedResource(ResourceKind.INGRESS, service.name),
            OwnedResource(ResourceKind.DEPLOYMENT, service.name),
            OwnedResource(ResourceKind.SERVICE, service.name),
            OwnedResource(ResourceKind.HPA, service.name),
        ]
        for volume in service.volumes:
            if volume.is_config_map_volume() or volume.is_secret_volume():
                continue
            resources.append(OwnedResource(ResourceKind.PVC, volume.name))
        return resources


class Workload(ServiceKind):
    """A plain container workload (Deployment + Service)."""

    def __repr__(self) -> str:
        return "Workload()"


class ExternalResource(ServiceKind):
    """A CRD-backed service, e.g. a managed database.

    Its pods are not created from the service definition, so limits never reach
    the cluster.
    """

    is_deployable = False

    def __init__(self, type_name: str):
        self.type_name = type_name

    def __repr__(self) -> str:
        return f"ExternalResource({self.type_name!r})"

    def owned_resources(self, service: Service) -> list[OwnedResource]:
        resources = super().owned_resources(service)
        resources.append(OwnedResource(ResourceKind.CUSTOM_RESOURCE, service.name, self.type_name))
        return resources


_WORKLOAD = Workload()


@dataclass
class Service:
    name: str = ""
    version: str = ""
    application: str = ""
    replicas: int = 0
    ports: list[int] = field(default_factory=list)
    external_url: list[str] = field(default_factory=list)
    backend: str = ""
    backend_port: int = 0
    ssl: str = ""
    service_mesh: str = ""
    http2: str = ""
    https_only: str = ""
    https_backend: str = ""
    deployment: DeploymentSettings | None = None
    hpa: HorizontalPodAutoscaler = field(default_factory=HorizontalPodAutoscaler)
    requests: ContainerRequests = field(default_factory=ContainerRequests)
    limits: ContainerLimits = field(default_factory=ContainerLimits)
    health_check: HealthCheck | None = None
    liveness_probe: Probe | None = None
    readiness_probe: Probe | None = None
    env_vars: list[EnvVar] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)
    volumes: list[Volume] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)
    type: str = ""
    database_type: str = ""
    grace_period: int | None = None
    target_namespace: str = ""
    chart: str = ""
    repo: str = ""
    values_content: str = ""
    ignore: bool = False
    status: ServiceStatus = field(default_factory=ServiceStatus)

    @property
    def kind(self) -> ServiceKind:
        if self.type:
            return ExternalResource(self.type)
        return _WORKLOAD

    def has_external_url(self) -> bool:
        return len(self.external_url) != 0

    def is_tls_enabled(self) -> bool:
        return self.ssl.lower() == "true"

    def deployment_method(self) -> str:
        if self.deployment is None:
            return DeploymentMethod.ROLLING_UPGRADE
        return self.deployment.method

    @classmethod
    def from_dict(cls, d: dict) -> Service:
        external_url = d.get("external_url") or []
        if isinstance(external_url, str):
            external_url = [external_url]

        def _probe(key: str) -> Probe | None:
            raw = d.get(key)
            return Probe.from_dict(raw) if raw else None

        health_check = d.get("health_check")
        deployment = d.get("deployment")
        return cls(
            name=d.get("name", ""),
            version=_text(d.get("version"), f"service {d.get('name', '')!r} version"),
            application=d.get("application", ""),
            replicas=d.get("replicas", 0),
            ports=[int(p) for p in d.get("ports") or []],
            external_url=list(external_url),
            backend=d.get("backend", ""),
            backend_port=d.get("backend_port", 0),
            # YAML may hand us a bool here
            ssl=str(d.get("ssl") or "").lower(),
            service_mesh=d.get("service_mesh", ""),
            http2=d.get("http2", ""),
            https_only=d.get("https_only", ""),
            https_backend=d.get("https_backend", ""),
            deployment=DeploymentSettings.from_dict(deployment) if deployment else None,
            hpa=HorizontalPodAutoscaler.from_dict(d.get("hpa") or {}),
            requests=ContainerRequests.from_dict(d.get("requests") or {}),
            limits=ContainerLimits.from_dict(d.get("limits") or {}),
            health_check=HealthCheck.from_dict(health_check) if health_check else None,
            liveness_probe=_probe("liveness_probe"),
            readiness_probe=_probe("readiness_probe"),
            env_vars=[EnvVar.from_dict(e) for e in d.get("env_vars") or []],
            commands=list(d.get("commands") or []),
            annotations={str(k): str(v) for k, v in (d.get("annotations") or {}).items()},
            volumes=[Volume.from_dict(v) for v in d.get("volumes") or []],
            options=dict(d.get("options") or {}),
            type=d.get("type", ""),
            database_type=d.get("database_type", ""),
            grace_period=d.get("grace_period"),
            target_namespace=d.get("target_namespace", ""),
            chart=d.get("chart", ""),
            repo=d.get("repo", ""),
            values_content=d.get("values_content", ""),
            ignore=bool(d.get("ignore", False)),
            status=ServiceStatus.from_dict(d.get("status") or {}),
        )


class Services(list):
    """Ordered, name-unique list of services."""

    def find_by_name(self, name: str) -> Service | None:
        """Return the stored service with a name match.

        The returned object is the list element itself; mutating it
        mutates this collection.
        """
        for i in range(len(self)):
            if self[i].name == name:
                return self[i]
        return None

    def names(self) -> list[str]:
        return [s.name for s in self]

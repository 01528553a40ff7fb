"""Kubernetes API wrapper used to remove and probe operator-managed objects."""

from __future__ import annotations

import logging
from typing import Callable

from kubernetes import client, config
from kubernetes.client import ApiException

from env_operator.config.settings import settings
from env_operator.models import ResourceKind

logger = logging.getLogger(__name__)


class K8sClient:
    """Thin wrapper around the Kubernetes Python client."""

    def __init__(self, context: str | None = None):
        self.context = context
        self._core_v1: client.CoreV1Api | None = None
        self._apps_v1: client.AppsV1Api | None = None
        self._batch_v1: client.BatchV1Api | None = None
        self._autoscaling_v2: client.AutoscalingV2Api | None = None
        self._networking_v1: client.NetworkingV1Api | None = None
        self._custom: client.CustomObjectsApi | None = None
        self._api_client: client.ApiClient | None = None

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        try:
            cfg = client.Configuration()
            config.load_kube_config(
                context=self.context,
                client_configuration=cfg,
            )
            # Prevent indefinite hangs on unreachable clusters
            cfg.retries = 1
            self._api_client = client.ApiClient(configuration=cfg)
        except config.ConfigException:
            config.load_incluster_config()
            self._api_client = client.ApiClient()
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(api_client=self._load_config())
        return self._core_v1

    @property
    def apps_v1(self) -> client.AppsV1Api:
        if self._apps_v1 is None:
            self._apps_v1 = client.AppsV1Api(api_client=self._load_config())
        return self._apps_v1

    @property
    def batch_v1(self) -> client.BatchV1Api:
        if self._batch_v1 is None:
            self._batch_v1 = client.BatchV1Api(api_client=self._load_config())
        return self._batch_v1

    @property
    def autoscaling_v2(self) -> client.AutoscalingV2Api:
        if self._autoscaling_v2 is None:
            self._autoscaling_v2 = client.AutoscalingV2Api(api_client=self._load_config())
        return self._autoscaling_v2

    @property
    def networking_v1(self) -> client.NetworkingV1Api:
        if self._networking_v1 is None:
            self._networking_v1 = client.NetworkingV1Api(api_client=self._load_config())
        return self._networking_v1

    @property
    def custom(self) -> client.CustomObjectsApi:
        if self._custom is None:
            self._custom = client.CustomObjectsApi(api_client=self._load_config())
        return self._custom

    def _delete_methods(self) -> dict[ResourceKind, Callable[..., object]]:
        return {
            ResourceKind.INGRESS: self.networking_v1.delete_namespaced_ingress,
            ResourceKind.DEPLOYMENT: self.apps_v1.delete_namespaced_deployment,
            ResourceKind.SERVICE: self.core_v1.delete_namespaced_service,
            ResourceKind.HPA: self.autoscaling_v2.delete_namespaced_horizontal_pod_autoscaler,
            ResourceKind.PVC: self.core_v1.delete_namespaced_persistent_volume_claim,
            ResourceKind.CONFIG_MAP: self.core_v1.delete_namespaced_config_map,
            ResourceKind.JOB: self.batch_v1.delete_namespaced_job,
            ResourceKind.CRON_JOB: self.batch_v1.delete_namespaced_cron_job,
        }

    def _read_methods(self) -> dict[ResourceKind, Callable[..., object]]:
        return {
            ResourceKind.INGRESS: self.networking_v1.read_namespaced_ingress,
            ResourceKind.DEPLOYMENT: self.apps_v1.read_namespaced_deployment,
            ResourceKind.SERVICE: self.core_v1.read_namespaced_service,
            ResourceKind.HPA: self.autoscaling_v2.read_namespaced_horizontal_pod_autoscaler,
            ResourceKind.PVC: self.core_v1.read_namespaced_persistent_volume_claim,
            ResourceKind.CONFIG_MAP: self.core_v1.read_namespaced_config_map,
            ResourceKind.JOB: self.batch_v1.read_namespaced_job,
            ResourceKind.CRON_JOB: self.batch_v1.read_namespaced_cron_job,
        }

    def _custom_object_coordinates(self, kind: ResourceKind, type_name: str) -> dict[str, str]:
        if kind == ResourceKind.EXTERNAL_SECRET:
            return {
                "group": settings.external_secret_group,
                "version": settings.external_secret_version,
                "plural": settings.external_secret_plural,
            }
        return {
            "group": settings.service_crd_group,
            "version": settings.service_crd_version,
            "plural": self._kind_to_plural(type_name),
        }

    def delete(self, kind: ResourceKind, name: str, namespace: str, type_name: str = "") -> bool:
        """Delete a namespaced object. Returns False if it was already gone."""
        try:
            if kind in (ResourceKind.EXTERNAL_SECRET, ResourceKind.CUSTOM_RESOURCE):
                self.custom.delete_namespaced_custom_object(
                    namespace=namespace,
                    name=name,
                    **self._custom_object_coordinates(kind, type_name),
                )
            else:
                self._delete_methods()[kind](
                    name=name,
                    namespace=namespace,
                    propagation_policy="Background",
                )
        except ApiException as e:
            if e.status == 404:
                return False
            raise
        return True

    def exists(self, kind: ResourceKind, name: str, namespace: str, type_name: str = "") -> bool:
        try:
            if kind in (ResourceKind.EXTERNAL_SECRET, ResourceKind.CUSTOM_RESOURCE):
                self.custom.get_namespaced_custom_object(
                    namespace=namespace,
                    name=name,
                    **self._custom_object_coordinates(kind, type_name),
                )
            else:
                self._read_methods()[kind](name=name, namespace=namespace)
        except ApiException as e:
            if e.status == 404:
                return False
            raise
        return True

    def external_secret_exists(self, namespace: str, name: str) -> bool:
        return self.exists(ResourceKind.EXTERNAL_SECRET, name, namespace)

    @staticmethod
    def _kind_to_plural(kind: str) -> str:
        k = kind.lower()
        if k.endswith("s"):
            return k + "es"
        if k.endswith("y"):
            return k[:-1] + "ies"
        return k + "s"


class DryRunClient:
    """Stands in for K8sClient and only records what would be deleted."""

    def __init__(self) -> None:
        self.deleted: list[tuple[ResourceKind, str, str]] = []

    def delete(self, kind: ResourceKind, name: str, namespace: str, type_name: str = "") -> bool:
        logger.info("dry-run: would delete %s %s/%s", kind.value, namespace, name)
        self.deleted.append((kind, name, namespace))
        return True

    def exists(self, kind: ResourceKind, name: str, namespace: str, type_name: str = "") -> bool:
        return True

    def external_secret_exists(self, namespace: str, name: str) -> bool:
        return True

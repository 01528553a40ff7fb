"""Remove cluster objects that are no longer declared in the desired environment."""

from __future__ import annotations

import logging
from typing import Protocol

from env_operator.config.settings import settings
from env_operator.core.bluegreen import is_blue_green_parent_deployment
from env_operator.errors import ConfigurationError, ObservedStateLoadError
from env_operator.models import ResourceKind
from env_operator.models.diff import CleanupReport, DeletionOutcome, DeletionStatus
from env_operator.models.environment import Environment, Gists
from env_operator.models.service import Service

logger = logging.getLogger(__name__)


class ClusterClient(Protocol):
    def delete(self, kind: ResourceKind, name: str, namespace: str, type_name: str = "") -> bool: ...

    def exists(self, kind: ResourceKind, name: str, namespace: str, type_name: str = "") -> bool: ...


class EnvironmentSource(Protocol):
    def load_environment(self, namespace: str) -> Environment: ...


class Reaper:
    """Deletes orphaned services, their components, and orphaned imports.

    Deletions are best effort: a failed delete is logged and recorded in
    the returned report, and the remaining deletions still run.
    """

    def __init__(
        self,
        client: ClusterClient,
        namespace: str,
        source: EnvironmentSource,
        external_secrets_enabled: bool | None = None,
    ):
        self.client = client
        self.namespace = namespace
        self.source = source
        if external_secrets_enabled is None:
            external_secrets_enabled = settings.external_secrets_enabled
        self.external_secrets_enabled = external_secrets_enabled

    def cleanup(self, desired: Environment | None) -> CleanupReport:
        """Delete everything in the namespace that ``desired`` no longer declares."""
        if desired is None or desired.services is None:
            raise ConfigurationError("REAPER: error with environment file, configuration is nil")

        try:
            current = self.source.load_environment(self.namespace)
        except Exception as e:
            raise ObservedStateLoadError(f"REAPER: error loading environment: {e}") from e

        report = CleanupReport(namespace=self.namespace)
        for service in current.services or []:
            config_service = desired.services.find_by_name(service.name)

            if config_service is None:
                logger.info("REAPER: found orphan service %s, deleting.", service.name)
                report.extend(self.delete_service(service))
            elif is_blue_green_parent_deployment(config_service):
                # a blue/green parent must not keep a plain deployment of its own name
                report.append(self._destroy_deployment(service.name))

            report.extend(self.cleanup_ingress(config_service, service))
            report.extend(self.cleanup_hpa(config_service, service))

        report.extend(self.cleanup_gists(desired.gists, current.gists))

        if report.failures:
            logger.warning(
                "REAPER: %d of %d deletions failed in %s",
                len(report.failures), len(report.outcomes), self.namespace,
            )
        return report

    def delete_service(self, service: Service) -> list[DeletionOutcome]:
        """Delete every cluster object owned by a service."""
        outcomes: list[DeletionOutcome] = []
        for resource in service.kind.owned_resources(service):
            if resource.kind == ResourceKind.INGRESS:
                outcomes.extend(self._destroy_ingress(resource.name))
            elif resource.kind == ResourceKind.DEPLOYMENT:
                outcomes.append(self._destroy_deployment(resource.name))
            else:
                outcomes.append(self._destroy(resource.kind, resource.name, resource.type_name))
        return outcomes

    def cleanup_ingress(self, config_service: Service | None, cluster_service: Service) -> list[DeletionOutcome]:
        """Delete the ingress when the service's external URL was removed from config."""
        if (
            config_service is not None
            and not config_service.has_external_url()
            and cluster_service.has_external_url()
        ):
            logger.info(
                "REAPER: deleting ingress %s because it was removed from the service config",
                cluster_service.name,
            )
            return self._destroy_ingress(cluster_service.name)
        return []

    def cleanup_hpa(self, config_service: Service | None, cluster_service: Service) -> list[DeletionOutcome]:
        """Delete the HPA when it was removed from the service config."""
        if (
            config_service is not None
            and not config_service.hpa.is_active
            and cluster_service.hpa.is_active
        ):
            logger.info(
                "REAPER: deleting hpa %s because it was removed from the service config",
                cluster_service.name,
            )
            return [self._destroy(ResourceKind.HPA, cluster_service.name)]
        return []

    def cleanup_gists(self, config_gists: Gists, cluster_gists: Gists) -> list[DeletionOutcome]:
        """Delete imported resources whose name no longer appears in config."""
        declared = config_gists.names() if config_gists else set()
        outcomes: list[DeletionOutcome] = []
        for gist in cluster_gists or []:
            if gist.name in declared:
                continue
            kind = ResourceKind.for_gist_type(gist.type)
            if kind is None:
                logger.debug("REAPER: no deletion defined for %s of type %s", gist.name, gist.type)
                outcomes.append(DeletionOutcome(
                    kind=None,
                    name=gist.name,
                    status=DeletionStatus.SKIPPED,
                    reason=f"unsupported type {gist.type!r}",
                ))
                continue
            logger.info("REAPER: found orphan resource %s, type %s, deleting.", gist.name, gist.type)
            outcomes.append(self._destroy(kind, gist.name))
        return outcomes

    def _destroy_ingress(self, name: str) -> list[DeletionOutcome]:
        outcomes: list[DeletionOutcome] = []
        if self.external_secrets_enabled:
            outcomes.append(self._destroy(ResourceKind.EXTERNAL_SECRET, name))
        outcomes.append(self._destroy(ResourceKind.INGRESS, name))
        return outcomes

    def _destroy_deployment(self, name: str) -> DeletionOutcome:
        try:
            present = self.client.exists(ResourceKind.DEPLOYMENT, name, self.namespace)
        except Exception as e:
            return self._failed(ResourceKind.DEPLOYMENT, name, e)
        if not present:
            return DeletionOutcome(ResourceKind.DEPLOYMENT, name, DeletionStatus.SKIPPED, reason="not present")
        return self._destroy(ResourceKind.DEPLOYMENT, name)

    def _destroy(self, kind: ResourceKind, name: str, type_name: str = "") -> DeletionOutcome:
        try:
            deleted = self.client.delete(kind, name, self.namespace, type_name)
        except Exception as e:
            return self._failed(kind, name, e)
        if not deleted:
            return DeletionOutcome(kind, name, DeletionStatus.NOT_FOUND)
        logger.info("REAPER: deleted %s %s", kind.value, name)
        return DeletionOutcome(kind, name, DeletionStatus.DELETED)

    def _failed(self, kind: ResourceKind, name: str, error: Exception) -> DeletionOutcome:
        logger.error("REAPER: failed to destroy %s %s: %s", kind.value, name, error)
        return DeletionOutcome(kind, name, DeletionStatus.FAILED, reason=str(error), error=error)

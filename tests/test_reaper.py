"""Tests for the reaper."""

from __future__ import annotations

import pytest

from env_operator.core.reaper import Reaper
from env_operator.errors import ConfigurationError, ObservedStateLoadError
from env_operator.models import Color, GistType, ResourceKind
from env_operator.models.diff import DeletionStatus
from env_operator.models.environment import Environment, Gist
from env_operator.models.service import HorizontalPodAutoscaler, Service, Volume


def _reaper(client, source, external_secrets_enabled=False) -> Reaper:
    return Reaper(client, "sample", source, external_secrets_enabled=external_secrets_enabled)


class TestCleanupErrors:
    def test_missing_config(self, cluster_client, static_source, make_env) -> None:
        reaper = _reaper(cluster_client(), static_source(make_env()))
        with pytest.raises(ConfigurationError):
            reaper.cleanup(None)
        with pytest.raises(ConfigurationError):
            reaper.cleanup(Environment(services=None))

    def test_observed_state_unavailable(self, cluster_client, failing_source, make_env) -> None:
        client = cluster_client()
        reaper = _reaper(client, failing_source)
        with pytest.raises(ObservedStateLoadError, match="cluster unreachable"):
            reaper.cleanup(make_env(Service(name="web")))
        assert client.deleted == []

    def test_namespace_passed_to_source(self, cluster_client, static_source, make_env) -> None:
        source = static_source(make_env())
        _reaper(cluster_client(), source).cleanup(make_env())
        assert source.namespaces == ["sample"]


class TestOrphanServices:
    def test_only_undeclared_service_removed(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client(present={(ResourceKind.DEPLOYMENT, "b")})
        observed = make_env(
            Service(name="a"),
            Service(name="b", volumes=[Volume(name="b-data", type="ebs"), Volume(name="b-cfg", type="configmap")]),
            Service(name="c"),
        )
        desired = make_env(Service(name="a"), Service(name="c"))

        report = _reaper(client, static_source(observed)).cleanup(desired)

        assert client.deleted == [
            (ResourceKind.INGRESS, "b"),
            (ResourceKind.DEPLOYMENT, "b"),
            (ResourceKind.SERVICE, "b"),
            (ResourceKind.HPA, "b"),
            (ResourceKind.PVC, "b-data"),
        ]
        assert report.ok
        assert len(report.deleted) == 5

    def test_absent_deployment_skipped(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client()
        report = _reaper(client, static_source(make_env(Service(name="b")))).cleanup(make_env())

        assert (ResourceKind.DEPLOYMENT, "b") not in client.deleted
        skipped = [o for o in report.outcomes if o.status == DeletionStatus.SKIPPED]
        assert [(o.kind, o.name) for o in skipped] == [(ResourceKind.DEPLOYMENT, "b")]

    def test_external_secret_removed_with_ingress(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client()
        _reaper(client, static_source(make_env(Service(name="b"))), external_secrets_enabled=True).cleanup(make_env())
        assert client.deleted[:2] == [(ResourceKind.EXTERNAL_SECRET, "b"), (ResourceKind.INGRESS, "b")]

    def test_custom_resource_removed(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client()
        _reaper(client, static_source(make_env(Service(name="db", type="mysql")))).cleanup(make_env())
        assert (ResourceKind.CUSTOM_RESOURCE, "db") in client.deleted
        assert client.type_names[(ResourceKind.CUSTOM_RESOURCE, "db")] == "mysql"

    def test_not_found_recorded(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client(missing={(ResourceKind.HPA, "b")})
        report = _reaper(client, static_source(make_env(Service(name="b")))).cleanup(make_env())
        hpa = [o for o in report.outcomes if o.kind == ResourceKind.HPA]
        assert hpa[0].status == DeletionStatus.NOT_FOUND
        assert report.ok

    def test_failed_delete_does_not_stop_cleanup(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client(failing={(ResourceKind.SERVICE, "b")})
        observed = make_env(Service(name="b"), Service(name="c"))

        report = _reaper(client, static_source(observed)).cleanup(make_env())

        assert not report.ok
        assert [(o.kind, o.name) for o in report.failures] == [(ResourceKind.SERVICE, "b")]
        assert "cannot delete" in report.failures[0].reason
        assert (ResourceKind.HPA, "b") in client.deleted
        assert (ResourceKind.SERVICE, "c") in client.deleted


class TestComponentCleanup:
    def test_removed_external_url(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client()
        observed = make_env(Service(name="web", external_url=["web.example.com"]))

        _reaper(client, static_source(observed)).cleanup(make_env(Service(name="web")))

        assert client.deleted == [(ResourceKind.INGRESS, "web")]

    def test_kept_external_url(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client()
        svc = Service(name="web", external_url=["web.example.com"])
        _reaper(client, static_source(make_env(svc))).cleanup(make_env(svc))
        assert client.deleted == []

    def test_removed_hpa(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client()
        observed = make_env(Service(name="web", hpa=HorizontalPodAutoscaler(min_replicas=1, max_replicas=3)))

        _reaper(client, static_source(observed)).cleanup(make_env(Service(name="web")))

        assert client.deleted == [(ResourceKind.HPA, "web")]

    def test_blue_green_parent_drops_plain_deployment(
        self, cluster_client, static_source, make_env, make_parent
    ) -> None:
        client = cluster_client(present={(ResourceKind.DEPLOYMENT, "svc")})
        observed = make_env(Service(name="svc"))

        _reaper(client, static_source(observed)).cleanup(make_env(make_parent(active=Color.BLUE)))

        assert client.deleted == [(ResourceKind.DEPLOYMENT, "svc")]


class TestGists:
    def test_orphan_gists_removed_by_name(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client()
        observed = make_env(gists=[
            Gist(name="x", type=GistType.CONFIG_MAP),
            Gist(name="y", type=GistType.CRON_JOB),
        ])
        desired = make_env(gists=[Gist(name="x", type=GistType.JOB)])

        _reaper(client, static_source(observed)).cleanup(desired)

        assert client.deleted == [(ResourceKind.CRON_JOB, "y")]

    def test_orphan_secret_gist_skipped(self, cluster_client, static_source, make_env) -> None:
        client = cluster_client()
        observed = make_env(gists=[Gist(name="creds", type=GistType.SECRET)])

        report = _reaper(client, static_source(observed)).cleanup(make_env())

        assert client.deleted == []
        assert report.outcomes[0].status == DeletionStatus.SKIPPED
        assert report.ok

"""Tests for blue/green naming and expansion."""

from __future__ import annotations

from env_operator.core.bluegreen import (
    active_deployment_name,
    active_deployment_tag,
    blue_green_url_for_kind,
    expand_blue_green_services,
    expand_environment,
    expand_parent,
    inactive_deployment_name,
    inactive_deployment_tag,
    is_active_blue_green_deployment,
    is_blue_green_child_deployment,
    is_blue_green_parent_deployment,
)
from env_operator.models import Color, DeploymentMethod
from env_operator.models.service import Service, Services


class TestPredicates:
    def test_parent(self, make_parent) -> None:
        parent = make_parent()
        assert is_blue_green_parent_deployment(parent)
        assert not is_blue_green_child_deployment(parent)
        assert not is_blue_green_parent_deployment(Service(name="web"))

    def test_children(self, make_parent) -> None:
        blue, green = expand_parent(make_parent(active=Color.BLUE))
        assert is_blue_green_child_deployment(blue)
        assert is_active_blue_green_deployment(blue)
        assert is_blue_green_child_deployment(green)
        assert not is_active_blue_green_deployment(green)
        assert not is_blue_green_parent_deployment(blue)

    def test_plain_service_is_not_active_child(self) -> None:
        assert not is_active_blue_green_deployment(Service(name="web"))


class TestNaming:
    def test_tags(self, make_parent) -> None:
        parent = make_parent(active=Color.BLUE)
        assert active_deployment_tag(parent) is Color.BLUE
        assert inactive_deployment_tag(parent) is Color.GREEN

        parent = make_parent(active=Color.GREEN)
        assert inactive_deployment_tag(parent) is Color.BLUE

    def test_unset_active(self, make_parent) -> None:
        parent = make_parent(active=None)
        assert active_deployment_tag(parent) is None
        assert inactive_deployment_tag(parent) is Color.BLUE
        assert active_deployment_name(parent) == "svc"
        assert inactive_deployment_name(parent) == "svc-blue"

    def test_names(self, make_parent) -> None:
        parent = make_parent(active=Color.GREEN)
        assert active_deployment_name(parent) == "svc-green"
        assert inactive_deployment_name(parent) == "svc-blue"

    def test_non_parent_names(self) -> None:
        svc = Service(name="web")
        assert active_deployment_name(svc) == "web"
        assert inactive_deployment_name(svc) == ""

    def test_switching_active_swaps_roles(self, make_parent) -> None:
        parent = make_parent(active=Color.BLUE)
        parent.deployment.blue_green.active = inactive_deployment_tag(parent)
        assert active_deployment_tag(parent) is Color.GREEN
        assert inactive_deployment_tag(parent) is Color.BLUE


class TestUrls:
    def test_colour_after_first_label(self) -> None:
        assert blue_green_url_for_kind("www.some.url", Color.BLUE) == "www-blue.some.url"

    def test_single_label(self) -> None:
        assert blue_green_url_for_kind("www", Color.GREEN) == "www-green"


class TestExpansion:
    def test_expand_parent(self, make_parent) -> None:
        parent = make_parent(active=Color.GREEN, version="1.0", external_url=["app.example.com"])
        blue, green = expand_parent(parent)

        assert blue.name == "svc-blue"
        assert green.name == "svc-green"
        assert blue.version == green.version == "1.0"
        for child in (blue, green):
            assert child.deployment.method == DeploymentMethod.ROLLING_UPGRADE
        assert blue.deployment.blue_green.deployment_colour is Color.BLUE
        assert not blue.deployment.blue_green.active_flag
        assert green.deployment.blue_green.active_flag
        assert blue.external_url == ["app-blue.example.com"]
        assert green.external_url == ["app-green.example.com"]

    def test_parent_untouched(self, make_parent) -> None:
        parent = make_parent(external_url=["app.example.com"], annotations={"a": "1"})
        blue, _ = expand_parent(parent)
        blue.annotations["b"] = "2"

        assert parent.name == "svc"
        assert parent.external_url == ["app.example.com"]
        assert parent.annotations == {"a": "1"}
        assert parent.deployment.method == DeploymentMethod.BLUE_GREEN

    def test_custom_urls_used_verbatim(self, make_parent) -> None:
        parent = make_parent(external_url=["app.example.com"])
        parent.deployment.custom_urls = {"blue": ["blue.internal.example.com"]}
        blue, green = expand_parent(parent)

        assert blue.external_url == ["blue.internal.example.com"]
        assert green.external_url == ["app-green.example.com"]

    def test_expand_services_appends_children(self, make_parent) -> None:
        services = Services([make_parent(name="api"), Service(name="web")])
        expanded = expand_blue_green_services(services)

        assert expanded.names() == ["api", "web", "api-blue", "api-green"]
        assert isinstance(expanded, Services)
        assert services.names() == ["api", "web"]

    def test_expand_environment_copies(self, make_env, make_parent) -> None:
        env = make_env(make_parent(), Service(name="web"))
        expanded = expand_environment(env)

        assert expanded.services.names() == ["svc", "web", "svc-blue", "svc-green"]
        assert env.services.names() == ["svc", "web"]
        assert expanded.namespace == env.namespace

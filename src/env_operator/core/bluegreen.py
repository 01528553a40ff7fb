"""Blue/green coordination: derive coloured copies of a service and track which serves traffic.

A *parent* service declares ``deployment.method: bluegreen`` and points at
the active colour. It never owns a Deployment itself; instead two *child*
services, ``<name>-blue`` and ``<name>-green``, are deployed as plain
rolling-upgrade services. Children know their own colour and whether they
are the active one.
"""

from __future__ import annotations

import copy
import logging

from env_operator.models import Color, DeploymentMethod
from env_operator.models.environment import Environment
from env_operator.models.service import BlueGreenSettings, DeploymentSettings, Service, Services

logger = logging.getLogger(__name__)


def is_blue_green_parent_deployment(svc: Service) -> bool:
    return svc.deployment is not None and svc.deployment.method == DeploymentMethod.BLUE_GREEN


def is_blue_green_child_deployment(svc: Service) -> bool:
    if svc.deployment is None or svc.deployment.blue_green is None:
        return False
    return svc.deployment.blue_green.deployment_colour is not None


def is_active_blue_green_deployment(svc: Service) -> bool:
    """True if this child currently serves traffic."""
    if not is_blue_green_child_deployment(svc):
        return False
    return svc.deployment.blue_green.active_flag


def active_deployment_tag(svc: Service) -> Color | None:
    """Colour the parent points at, or None when no colour is known."""
    if svc.deployment is None or svc.deployment.blue_green is None:
        return None
    return svc.deployment.blue_green.active


def inactive_deployment_tag(svc: Service) -> Color:
    """Colour that is not serving traffic; Blue when no active colour is known."""
    active = active_deployment_tag(svc)
    if active is None:
        return Color.BLUE
    return active.complement


def active_deployment_name(svc: Service) -> str:
    if not is_blue_green_parent_deployment(svc):
        return svc.name
    tag = active_deployment_tag(svc)
    if tag is None:
        return svc.name
    return f"{svc.name}-{tag}"


def inactive_deployment_name(svc: Service) -> str:
    if not is_blue_green_parent_deployment(svc):
        return ""
    return f"{svc.name}-{inactive_deployment_tag(svc)}"


def blue_green_url_for_kind(url: str, color: Color) -> str:
    """Insert the colour after the first label: ``www.a.b`` -> ``www-blue.a.b``."""
    head, sep, rest = url.partition(".")
    return f"{head}-{color}{sep}{rest}"


def _copy_blue_green_service(parent: Service, color: Color) -> Service:
    child = copy.deepcopy(parent)
    child.name = f"{parent.name}-{color}"
    child.deployment = DeploymentSettings(
        method=DeploymentMethod.ROLLING_UPGRADE,
        blue_green=BlueGreenSettings(
            deployment_colour=color,
            active_flag=active_deployment_tag(parent) == color,
        ),
    )

    custom_urls = parent.deployment.custom_urls if parent.deployment else {}
    external_urls = list(custom_urls.get(str(color)) or [])
    if not external_urls:
        external_urls = [blue_green_url_for_kind(u, color) for u in parent.external_url]
    child.external_url = external_urls
    return child


def expand_parent(parent: Service) -> tuple[Service, Service]:
    """Return the (blue, green) children of a blue/green parent.

    The parent is left untouched; children are deep copies.
    """
    return (
        _copy_blue_green_service(parent, Color.BLUE),
        _copy_blue_green_service(parent, Color.GREEN),
    )


def expand_blue_green_services(services: Services) -> Services:
    """Return the services followed by the children of every blue/green parent."""
    children = Services()
    for svc in services:
        if is_blue_green_parent_deployment(svc):
            blue, green = expand_parent(svc)
            logger.debug(
                "Expanded blue/green service %s into %s and %s (active: %s)",
                svc.name, blue.name, green.name, active_deployment_tag(svc),
            )
            children.extend((blue, green))
    return Services([*services, *children])


def expand_environment(env: Environment) -> Environment:
    """Copy of a desired environment with blue/green children added."""
    expanded = copy.copy(env)
    expanded.services = expand_blue_green_services(env.services or Services())
    return expanded

"""Decide which services need a deploy by comparing desired and observed environments."""

from __future__ import annotations

import copy
import enum
import logging
import re
from dataclasses import asdict, is_dataclass
from typing import Any, Protocol

from deepdiff import DeepDiff

from env_operator.config.settings import settings
from env_operator.core.bluegreen import (
    active_deployment_name,
    is_active_blue_green_deployment,
    is_blue_green_parent_deployment,
)
from env_operator.models.diff import ChangeSet
from env_operator.models.environment import Environment
from env_operator.models.service import Probe, Service, Services
from env_operator.utils import quantity

logger = logging.getLogger(__name__)

_PATH_KEY = re.compile(r"\['([^']*)'\]")


class SecretLookup(Protocol):
    def external_secret_exists(self, namespace: str, name: str) -> bool: ...


def compare(
    desired: Environment,
    observed: Environment,
    *,
    secrets: SecretLookup | None = None,
    external_secrets_enabled: bool | None = None,
) -> tuple[ChangeSet, bool]:
    """Compare a desired environment with the one running in the cluster.

    Returns the services that need a deploy, each with the diff that
    explains why, and whether there is anything to do at all. Neither
    argument is modified.
    """
    if external_secrets_enabled is None:
        external_secrets_enabled = settings.external_secrets_enabled

    changes = ChangeSet()
    desired = _prepare(desired)
    observed = _prepare(observed)
    observed_services = observed.services or Services()

    for desired_svc in desired.services or Services():
        name = desired_svc.name
        logger.debug("Checking desired configuration against running service %s", name)
        existing_svc = observed_services.find_by_name(name)

        if is_active_blue_green_deployment(desired_svc):
            logger.debug("Ignoring changes for active blue/green deployment %s", name)
            continue

        if is_blue_green_parent_deployment(desired_svc):
            reason = _blue_green_parent_change(desired_svc, existing_svc)
            if reason:
                changes.record(name, reason)
                continue

        # Only deploy when git or the cluster knows a version for the service
        deployed_has_version = existing_svc is not None and existing_svc.version != ""
        if desired_svc.version != "" or deployed_has_version:
            if existing_svc is not None:
                align_services(desired_svc, existing_svc)
            diff_text = structural_diff(existing_svc, desired_svc)
            if diff_text:
                logger.debug("Detected changes for service %s:\n%s", name, diff_text)
                changes.record(name, diff_text)
            else:
                logger.debug("No changes detected for service %s", name)
        else:
            logger.debug('"version" field not set for service %s. Skipping deployment.', name)

        if (
            external_secrets_enabled
            and secrets is not None
            and desired_svc.is_tls_enabled()
            and not secrets.external_secret_exists(desired.namespace, name)
        ):
            logger.debug("External secret missing for service %s", name)
            changes.record(name, f"ExternalSecrets: +{name}")

    if changes.has_changes:
        logger.debug("Detected %d changes in environment", len(changes))
    else:
        logger.debug("No changes detected for environment")
    return changes, changes.has_changes


def _prepare(env: Environment) -> Environment:
    """Working copy with the fields that never drive a deploy cleared."""
    env = copy.deepcopy(env)
    env.tests = []
    env.deployment = None
    env.name = ""
    return env


def _blue_green_parent_change(desired: Service, existing: Service | None) -> str:
    if existing is None:
        logger.debug("Applying changes for new blue/green parent service %s", desired.name)
        return structural_diff(None, desired) or f"Name: +{desired.name}"

    url_diff = _format_diff(DeepDiff(
        {"external_url": existing.external_url},
        {"external_url": desired.external_url},
        verbose_level=2,
    ))
    if url_diff:
        logger.debug("Change detected for blue/green service %s external URLs", desired.name)
        return url_diff

    existing_active = active_deployment_name(existing)
    desired_active = active_deployment_name(desired)
    if existing_active != desired_active:
        logger.debug("Change detected for blue/green service %s active deployment", desired.name)
        return f"Changed active_deployment: {existing_active!r} -> {desired_active!r}"
    return ""


def align_services(desired: Service, current: Service) -> None:
    """Copy cluster-owned or equivalent values from ``current`` into ``desired``.

    Both services are modified in place: ``desired`` picks up values that
    would otherwise show up as noise, and blue/green bookkeeping is
    cleared on both.
    """
    if desired.version == "":
        desired.version = current.version

    if desired.application == "" and current.application != "":
        desired.application = current.application

    # status only exists in the cluster
    desired.status = copy.deepcopy(current.status)

    if desired.deployment is not None:
        desired.deployment.blue_green = None
    if current.deployment is not None:
        current.deployment.blue_green = None

    if not desired.kind.is_deployable:
        desired.limits.memory = current.limits.memory
        desired.limits.cpu = current.limits.cpu
        if desired.type.lower() == current.type.lower():
            desired.type = current.type

    if quantity.equivalent(desired.requests.memory, current.requests.memory):
        desired.requests.memory = current.requests.memory
    if quantity.equivalent(desired.requests.cpu, current.requests.cpu):
        desired.requests.cpu = current.requests.cpu
    if quantity.equivalent(desired.limits.memory, current.limits.memory):
        desired.limits.memory = current.limits.memory
    if quantity.equivalent(desired.limits.cpu, current.limits.cpu):
        desired.limits.cpu = current.limits.cpu

    # the HPA owns the replica count once it is active
    if current.hpa.is_active:
        desired.replicas = current.replicas

    _align_probe(desired.liveness_probe, current.liveness_probe)
    _align_probe(desired.readiness_probe, current.readiness_probe)

    if current.version == "":
        # Not deployed yet: annotations only live on the deployment object
        desired.annotations = dict(current.annotations)
    else:
        for key, value in current.annotations.items():
            if not desired.annotations.get(key):
                desired.annotations[key] = value


def _align_probe(desired: Probe | None, current: Probe | None) -> None:
    if desired is None or current is None:
        return
    for attr in (
        "initial_delay_seconds",
        "timeout_seconds",
        "period_seconds",
        "success_threshold",
        "failure_threshold",
    ):
        if getattr(desired, attr) == 0:
            setattr(desired, attr, getattr(current, attr))

    if desired.http_get is None or current.http_get is None:
        return
    for attr in ("path", "host", "scheme", "http_headers"):
        if not getattr(desired.http_get, attr):
            setattr(desired.http_get, attr, copy.deepcopy(getattr(current.http_get, attr)))


def structural_diff(current: Service | None, desired: Service | None) -> str:
    """Readable diff between two services, ignoring zero-valued fields."""
    diff = DeepDiff(_to_comparable(current), _to_comparable(desired), verbose_level=2)
    return _format_diff(diff)


def _to_comparable(obj: Any) -> Any:
    if obj is None:
        return {}
    if is_dataclass(obj):
        obj = asdict(obj)
    return _strip_zero_fields(obj)


def _is_zero(value: Any) -> bool:
    if isinstance(value, (list, dict)):
        return not value
    return value is None or value is False or value == "" or value == 0


def _strip_zero_fields(obj: Any) -> Any:
    """Drop zero-valued dict entries at every level; enum values become their names."""
    if isinstance(obj, dict):
        cleaned = {}
        for key, value in obj.items():
            value = _strip_zero_fields(value)
            if not _is_zero(value):
                cleaned[key] = value
        return cleaned
    if isinstance(obj, list):
        return [_strip_zero_fields(v) for v in obj]
    if isinstance(obj, enum.Enum):
        return str(obj)
    return obj


def _pretty_path(path: str) -> str:
    path = path[len("root"):] if path.startswith("root") else path
    return _PATH_KEY.sub(r".\1", path).lstrip(".") or "<root>"


def _entries(diff: DeepDiff, key: str) -> list[tuple[str, Any]]:
    """(path, value) pairs; lower verbosity levels report bare paths."""
    items = diff.get(key, {})
    if isinstance(items, dict):
        return list(items.items())
    return [(path, None) for path in items]


def _format_diff(diff: DeepDiff) -> str:
    """Format DeepDiff output into human-readable lines."""
    details: list[str] = []

    for path, change in diff.get("values_changed", {}).items():
        old = change.get("old_value", "?")
        new = change.get("new_value", "?")
        details.append(f"Changed {_pretty_path(path)}: {old!r} -> {new!r}")

    for path, change in diff.get("type_changes", {}).items():
        old = change.get("old_value", "?")
        new = change.get("new_value", "?")
        details.append(f"Changed {_pretty_path(path)}: {old!r} -> {new!r}")

    for path, value in _entries(diff, "dictionary_item_added"):
        details.append(f"Added {_pretty_path(path)}: {value!r}")

    for path, value in _entries(diff, "dictionary_item_removed"):
        details.append(f"Removed {_pretty_path(path)}: {value!r}")

    for path, value in _entries(diff, "iterable_item_added"):
        details.append(f"List item added {_pretty_path(path)}: {value!r}")

    for path, value in _entries(diff, "iterable_item_removed"):
        details.append(f"List item removed {_pretty_path(path)}: {value!r}")

    return "\n".join(details)

"""One reconciliation tick: expand, compare, apply, reap."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from env_operator.core.bluegreen import expand_environment
from env_operator.core.diff_engine import SecretLookup, compare
from env_operator.core.reaper import Reaper
from env_operator.models.diff import ChangeSet, CleanupReport
from env_operator.models.environment import Environment
from env_operator.models.service import Service, Services

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    changes: ChangeSet
    applied: list[str] = field(default_factory=list)
    apply_errors: dict[str, Exception] = field(default_factory=dict)
    cleanup: CleanupReport | None = None

    @property
    def changed(self) -> bool:
        return self.changes.has_changes


def run_tick(
    desired: Environment,
    observed: Environment,
    apply_service: Callable[[Service], None],
    reaper: Reaper | None = None,
    secrets: SecretLookup | None = None,
) -> TickResult:
    """Bring the cluster one step closer to ``desired``.

    ``desired`` is the environment as loaded from config (blue/green
    children not yet expanded); ``observed`` is what the cluster runs.
    Services are applied through ``apply_service``; a failed apply is
    logged and recorded, and the remaining services are still applied.
    """
    desired = expand_environment(desired)
    changes, changed = compare(desired, observed, secrets=secrets)
    result = TickResult(changes=changes)

    if changed:
        services = desired.services or Services()
        for name in changes:
            logger.info("Changes detected for service %s:\n%s", name, changes[name])
            service = services.find_by_name(name)
            if service is None:
                continue
            try:
                apply_service(service)
            except Exception as e:
                logger.error("Failed to apply service %s: %s", name, e)
                result.apply_errors[name] = e
                continue
            result.applied.append(name)

    if reaper is not None:
        result.cleanup = reaper.cleanup(desired)
    return result

"""Change detection and cleanup result models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator

from env_operator.models import ResourceKind


@dataclass
class ChangeSet:
    """Service name -> human-readable reason a deploy is needed.

    A fresh ChangeSet is returned from every compare call.
    """

    changes: dict[str, str] = field(default_factory=dict)

    def record(self, service_name: str, diff_text: str) -> None:
        self.changes[service_name] = diff_text

    def names(self) -> list[str]:
        return list(self.changes)

    def as_dict(self) -> dict[str, str]:
        return dict(self.changes)

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)

    def __contains__(self, service_name: object) -> bool:
        return service_name in self.changes

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self) -> Iterator[str]:
        return iter(self.changes)

    def __getitem__(self, service_name: str) -> str:
        return self.changes[service_name]


class DeletionStatus(enum.Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class DeletionOutcome:
    kind: ResourceKind | None
    name: str
    status: DeletionStatus
    reason: str = ""
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.status == DeletionStatus.FAILED


@dataclass
class CleanupReport:
    namespace: str
    outcomes: list[DeletionOutcome] = field(default_factory=list)

    def append(self, outcome: DeletionOutcome) -> None:
        self.outcomes.append(outcome)

    def extend(self, outcomes: list[DeletionOutcome]) -> None:
        self.outcomes.extend(outcomes)

    @property
    def failures(self) -> list[DeletionOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def deleted(self) -> list[DeletionOutcome]:
        return [o for o in self.outcomes if o.status == DeletionStatus.DELETED]

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def summary(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for o in self.outcomes:
            key = o.status.value
            counts[key] = counts.get(key, 0) + 1
        return counts

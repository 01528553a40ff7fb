"""Data models for the environment operator."""

from __future__ import annotations

import enum

from env_operator.errors import InvalidColorError


class Color(enum.Enum):
    """Blue/green colour. The unset state is ``None``, never a member."""

    BLUE = 1
    GREEN = 2

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def complement(self) -> Color:
        return Color.GREEN if self is Color.BLUE else Color.BLUE

    @classmethod
    def from_str(cls, s: str | None) -> Color | None:
        """Look up a colour by name.

        An empty name means "unset" and returns None. A name that is set
        but unknown raises InvalidColorError, so the two never read alike.
        """
        if s is None or s == "":
            return None
        if not isinstance(s, str):
            raise InvalidColorError(f"blue_green: colour must be a name, got {s!r}")
        for member in cls:
            if str(member) == s.lower():
                return member
        raise InvalidColorError(f"blue_green: invalid colour {s!r}")


class DeploymentMethod:
    ROLLING_UPGRADE = "rolling-upgrade"
    BLUE_GREEN = "bluegreen"


class GistType:
    CONFIG_MAP = "configmap"
    JOB = "job"
    CRON_JOB = "cronjob"
    SECRET = "secret"


class ResourceKind(enum.Enum):
    INGRESS = "ingress"
    EXTERNAL_SECRET = "externalsecret"
    DEPLOYMENT = "deployment"
    SERVICE = "service"
    HPA = "horizontalpodautoscaler"
    PVC = "persistentvolumeclaim"
    CUSTOM_RESOURCE = "customresource"
    CONFIG_MAP = "configmap"
    JOB = "job"
    CRON_JOB = "cronjob"

    @classmethod
    def for_gist_type(cls, gist_type: str) -> ResourceKind | None:
        """Map an imported resource type to its cluster kind (secrets have none)."""
        return {
            GistType.CONFIG_MAP: cls.CONFIG_MAP,
            GistType.JOB: cls.JOB,
            GistType.CRON_JOB: cls.CRON_JOB,
        }.get(gist_type)

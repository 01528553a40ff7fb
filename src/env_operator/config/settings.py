"""Application configuration and defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() == "true"


@dataclass
class Settings:
    namespace: str = field(default_factory=lambda: os.environ.get("NAMESPACE", ""))
    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "info"))
    external_secrets_enabled: bool = field(
        default_factory=lambda: _env_flag("EXTERNAL_CRD_EXTERNAL_SECRETS_ENABLED")
    )
    external_secret_group: str = "kubernetes-client.io"
    external_secret_version: str = "v1"
    external_secret_plural: str = "externalsecrets"
    # CRD-backed ("typed") services live in this API group
    service_crd_group: str = "prsn.io"
    service_crd_version: str = "v1"
    default_output: str = "table"

    @property
    def log_level_number(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


# Global singleton
settings = Settings()

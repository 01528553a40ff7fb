"""Shared CLI options."""

from __future__ import annotations

import typer

from env_operator.config.settings import settings

OutputOption = typer.Option(settings.default_output, "--output", "-o", help="Output format: table, json, yaml")
NamespaceOption = typer.Option(None, "--namespace", "-n", help="Kubernetes namespace (default: from snapshot or NAMESPACE)")
ContextOption = typer.Option(None, "--context", help="Kubernetes context name")

"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from env_operator.core.bluegreen import active_deployment_tag, is_active_blue_green_deployment
from env_operator.models.diff import ChangeSet, CleanupReport
from env_operator.models.service import Service, Services

console = Console()


def _emit(data: Any, fmt: str) -> None:
    if fmt == "json":
        console.print_json(json.dumps(data, indent=2))
    else:
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=False))


def _service_to_dict(svc: Service) -> dict[str, Any]:
    bg = svc.deployment.blue_green if svc.deployment else None
    colour = bg.deployment_colour if bg and bg.deployment_colour else active_deployment_tag(svc)
    return {
        "name": svc.name,
        "method": svc.deployment_method(),
        "colour": str(colour) if colour else None,
        "active": is_active_blue_green_deployment(svc),
        "version": svc.version,
        "external_url": svc.external_url,
    }


def output_changes(changes: ChangeSet, fmt: str) -> None:
    if fmt in ("json", "yaml"):
        _emit({"changed": changes.has_changes, "services": changes.as_dict()}, fmt)
        return
    if not changes.has_changes:
        console.print("[green]No changes detected. Cluster matches desired environment.[/green]")
        return
    from env_operator.output.tables import change_set_table
    console.print(change_set_table(changes))
    console.print(f"\n[yellow]{len(changes)} service(s) need a deploy.[/yellow]")


def output_services(services: Services, fmt: str) -> None:
    if fmt in ("json", "yaml"):
        _emit([_service_to_dict(s) for s in services], fmt)
        return
    from env_operator.output.tables import expansion_table
    console.print(expansion_table(services))


def output_cleanup(report: CleanupReport, fmt: str) -> None:
    if fmt in ("json", "yaml"):
        data = {
            "namespace": report.namespace,
            "ok": report.ok,
            "summary": report.summary,
            "resources": [
                {
                    "kind": o.kind.value if o.kind is not None else None,
                    "name": o.name,
                    "status": o.status.value,
                    "reason": o.reason,
                }
                for o in report.outcomes
            ],
        }
        _emit(data, fmt)
        return
    from env_operator.output.tables import cleanup_table
    console.print(cleanup_table(report))
    if report.ok:
        console.print(f"\n[green]Cleanup finished:[/green] {report.summary}")
    else:
        console.print(f"\n[red]Cleanup finished with failures:[/red] {report.summary}")

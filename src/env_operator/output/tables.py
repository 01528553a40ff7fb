"""Rich table builders for each command."""

from __future__ import annotations

from rich.table import Table

from env_operator.core.bluegreen import (
    active_deployment_tag,
    is_active_blue_green_deployment,
    is_blue_green_parent_deployment,
)
from env_operator.models.diff import ChangeSet, CleanupReport
from env_operator.models.service import Services
from env_operator.output.themes import styled_colour, styled_deletion


def change_set_table(changes: ChangeSet, max_lines: int = 5) -> Table:
    table = Table(title="Pending Changes", expand=True)
    table.add_column("Service", style="bold", no_wrap=True)
    table.add_column("Diff", max_width=80)

    for name in sorted(changes):
        lines = changes[name].splitlines()
        detail = "\n".join(lines[:max_lines])
        if len(lines) > max_lines:
            detail += f"\n... +{len(lines) - max_lines} more"
        table.add_row(name, detail)
    return table


def expansion_table(services: Services) -> Table:
    table = Table(title="Services", expand=True)
    table.add_column("Service", style="bold", no_wrap=True)
    table.add_column("Method", style="magenta")
    table.add_column("Colour", no_wrap=True)
    table.add_column("Active", justify="center")
    table.add_column("Version", style="cyan")
    table.add_column("External URLs", style="blue")

    for svc in services:
        if is_blue_green_parent_deployment(svc):
            colour = styled_colour(active_deployment_tag(svc))
            active = ""
        elif svc.deployment is not None and svc.deployment.blue_green is not None:
            colour = styled_colour(svc.deployment.blue_green.deployment_colour)
            active = "[green]yes[/green]" if is_active_blue_green_deployment(svc) else "no"
        else:
            colour = styled_colour(None)
            active = ""
        table.add_row(
            svc.name,
            svc.deployment_method(),
            colour,
            active,
            svc.version,
            "\n".join(svc.external_url),
        )
    return table


def cleanup_table(report: CleanupReport) -> Table:
    table = Table(title=f"Cleanup: {report.namespace}", expand=True)
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Status", no_wrap=True)
    table.add_column("Reason", max_width=60)

    for o in report.outcomes:
        kind = o.kind.value if o.kind is not None else "-"
        table.add_row(kind, o.name, styled_deletion(o.status), o.reason)
    return table

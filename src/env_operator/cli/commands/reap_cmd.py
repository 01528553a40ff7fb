"""envop reap <desired> <observed> - Delete resources no longer declared."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from env_operator.cli.options import ContextOption, NamespaceOption, OutputOption
from env_operator.config.settings import settings
from env_operator.core.bluegreen import expand_environment
from env_operator.core.k8s_client import DryRunClient, K8sClient
from env_operator.core.reaper import Reaper
from env_operator.errors import OperatorError
from env_operator.output.formatters import output_cleanup
from env_operator.utils.snapshot import SnapshotSource, load_environment

app = typer.Typer()


@app.callback(invoke_without_command=True)
def reap(
    desired: Path = typer.Argument(help="Desired environment snapshot (YAML/JSON)"),
    observed: Path = typer.Argument(help="Observed environment snapshot (YAML/JSON)"),
    output: str = OutputOption,
    namespace: Optional[str] = NamespaceOption,
    context: Optional[str] = ContextOption,
    dry_run: bool = typer.Option(False, "--dry-run", help="Only report what would be deleted"),
) -> None:
    """Delete services, components and imports missing from DESIRED."""
    try:
        desired_env = expand_environment(load_environment(desired))
    except OperatorError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    ns = namespace or desired_env.namespace or settings.namespace
    if not ns:
        typer.echo("No namespace given and none found in the desired snapshot.", err=True)
        raise typer.Exit(code=1)

    client = DryRunClient() if dry_run else K8sClient(context=context)
    reaper = Reaper(client, ns, SnapshotSource(observed))
    try:
        report = reaper.cleanup(desired_env)
    except OperatorError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    output_cleanup(report, output)
    if not report.ok:
        raise typer.Exit(code=1)

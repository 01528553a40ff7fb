"""envop diff <desired> <observed> - Show which services need a deploy."""

from __future__ import annotations

from pathlib import Path

import typer

from env_operator.cli.options import OutputOption
from env_operator.core.bluegreen import expand_environment
from env_operator.core.diff_engine import compare
from env_operator.errors import OperatorError
from env_operator.output.formatters import output_changes
from env_operator.utils.snapshot import load_environment

app = typer.Typer()


@app.callback(invoke_without_command=True)
def diff(
    desired: Path = typer.Argument(help="Desired environment snapshot (YAML/JSON)"),
    observed: Path = typer.Argument(help="Observed environment snapshot (YAML/JSON)"),
    output: str = OutputOption,
    expand: bool = typer.Option(True, "--expand/--no-expand", help="Expand blue/green services in DESIRED first"),
) -> None:
    """Compare a desired environment against the observed one."""
    try:
        desired_env = load_environment(desired)
        observed_env = load_environment(observed)
    except OperatorError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    if expand:
        desired_env = expand_environment(desired_env)

    changes, _ = compare(desired_env, observed_env)
    output_changes(changes, output)

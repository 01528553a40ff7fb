"""envop expand <desired> - Show blue/green expansion of services."""

from __future__ import annotations

from pathlib import Path

import typer

from env_operator.cli.options import OutputOption
from env_operator.core.bluegreen import expand_environment
from env_operator.errors import OperatorError
from env_operator.output.formatters import output_services
from env_operator.utils.snapshot import load_environment

app = typer.Typer()


@app.callback(invoke_without_command=True)
def expand(
    desired: Path = typer.Argument(help="Desired environment snapshot (YAML/JSON)"),
    output: str = OutputOption,
) -> None:
    """List services including the blue and green copies of blue/green services."""
    try:
        env = load_environment(desired)
    except OperatorError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    output_services(expand_environment(env).services, output)

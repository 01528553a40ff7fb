"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from env_operator.config.settings import settings

app = typer.Typer(
    name="envop",
    help="Environment Operator - inspect reconciliation decisions.",
    no_args_is_help=True,
)


@app.callback()
def _configure(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="debug, info, warning, error"),
) -> None:
    settings.log_level = log_level
    logging.basicConfig(
        level=settings.log_level_number,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _register_commands() -> None:
    from env_operator.cli.commands.diff_cmd import app as diff_app
    from env_operator.cli.commands.expand_cmd import app as expand_app
    from env_operator.cli.commands.reap_cmd import app as reap_app

    app.add_typer(diff_app, name="diff", help="Show which services need a deploy")
    app.add_typer(expand_app, name="expand", help="Show blue/green expansion of services")
    app.add_typer(reap_app, name="reap", help="Delete resources no longer declared")


_register_commands()


def main() -> None:
    app()

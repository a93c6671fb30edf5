from __future__ import annotations

from typing import Annotated

import typer

from modemmanager_exporter.utils.logging import setup_logging

from . import config as config_cmd
from .modems import register as register_modems
from .serve import register as register_serve

app = typer.Typer(
    help="Prometheus exporter for ModemManager and its modems", no_args_is_help=True
)

app.add_typer(config_cmd.app, name="config")

register_serve(app)
register_modems(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="DEBUG, INFO, WARNING or ERROR; overrides MM_EXPORTER_LOG_LEVEL",
        ),
    ] = None,
) -> None:
    """modemmanager-exporter CLI."""
    setup_logging(log_level)

    if version:
        from importlib.metadata import version as get_version

        typer.echo(
            f"modemmanager-exporter version {get_version('modemmanager-exporter')}"
        )
        raise typer.Exit()

from __future__ import annotations

from typing import Annotated

import typer

from modemmanager_exporter.config import Settings, render_settings_toml, write_settings

from .common import load_settings_or_exit, resolve_config_path_or_exit

app = typer.Typer(no_args_is_help=True, help="Show or create the config file")


def _metrics_url(settings: Settings) -> str:
    exporter = settings.exporter
    return f"http://{exporter.address or '*'}:{exporter.port}{exporter.metrics_path}"


@app.command("show")
def show_config() -> None:
    """Print the effective settings and the file they were read from."""
    settings = load_settings_or_exit()
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    if exists:
        typer.echo(f"# Loaded from {path}")
    else:
        typer.echo(f"# No file at {path}, using built-in defaults")
    typer.echo(f"# Metrics served at {_metrics_url(settings)}")
    typer.echo(render_settings_toml(settings))


@app.command("init")
def init_config(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file"),
    ] = False,
) -> None:
    """Write a config file holding the built-in defaults."""
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    if exists and not force:
        typer.echo(f"{path} already exists; pass --force to replace it")
        raise typer.Exit(code=1)

    write_settings(Settings(), path)
    typer.echo(f"Wrote exporter defaults to {path}")

from __future__ import annotations

from pathlib import Path

import typer

from modemmanager_exporter.config import Settings, get_settings, resolve_config_path


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def parse_address(value: str) -> tuple[str, int]:
    """Split ``host:port`` (host may be empty or a bracketed IPv6 address)."""
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit() or not 1 <= int(port) <= 65535:
        raise ValueError(f"Invalid listen address: {value!r}")
    return host.strip("[]"), int(port)


def parse_address_or_exit(value: str) -> tuple[str, int]:
    try:
        return parse_address(value)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

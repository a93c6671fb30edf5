from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from .paths import default_config_path, expand_path

CONFIG_ENV_VAR = "MM_EXPORTER_CONFIG"


class ExporterConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    address: str = ""
    port: int = Field(default=9539, ge=1, le=65535)
    metrics_path: str = "/metrics"

    @field_validator("metrics_path")
    @classmethod
    def _absolute_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("metrics_path must start with '/'")
        return value


class ModemManagerConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    signal_rate: float = Field(default=5.0, gt=0)
    scrape_timeout: float = Field(default=5.0, gt=0)
    connect_timeout: float = Field(default=5.0, gt=0)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    exporter: ExporterConfig = Field(default_factory=ExporterConfig)
    modemmanager: ModemManagerConfig = Field(default_factory=ModemManagerConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def _toml_string(value: str) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    lines = [
        "# modemmanager-exporter configuration",
        "",
        "[exporter]",
        f"address = {_toml_string(settings.exporter.address)}",
        f"port = {settings.exporter.port}",
        f"metrics_path = {_toml_string(settings.exporter.metrics_path)}",
        "",
        "[modemmanager]",
        f"signal_rate = {settings.modemmanager.signal_rate}",
        f"scrape_timeout = {settings.modemmanager.scrape_timeout}",
        f"connect_timeout = {settings.modemmanager.connect_timeout}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))

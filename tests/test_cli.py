from __future__ import annotations

import importlib

import pytest
from typer.testing import CliRunner

import modemmanager_exporter.cli.modems as modems_cmd
import modemmanager_exporter.cli.serve as serve_cmd
from modemmanager_exporter import __version__
from modemmanager_exporter.cli import app
from modemmanager_exporter.cli.common import parse_address
from modemmanager_exporter.config import (
    CONFIG_ENV_VAR,
    ExporterConfig,
    Settings,
    default_config_path,
    write_settings,
)
from modemmanager_exporter.models import ModemState

runner = CliRunner()

# The package re-exports the Typer object under the submodule's name.
app_module = importlib.import_module("modemmanager_exporter.cli.app")


class FakeClient:
    def __init__(self, modems) -> None:
        self.modems_ = list(modems)
        self.closed = False

    @property
    def version(self) -> str:
        return "1.14.0"

    async def modems(self):
        return self.modems_

    async def for_each_modem(self, fn) -> None:
        for modem in self.modems_:
            await fn(modem)

    def close(self) -> None:
        self.closed = True


def _fake_client_class(client: FakeClient):
    class _Client:
        @classmethod
        async def dial(cls, bus=None):
            return client

    return _Client


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"modemmanager-exporter version {__version__}" in result.stdout


def test_version_short():
    result = runner.invoke(app, ["-v"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_config_show_defaults():
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert f"# No file at {default_config_path()}, using built-in defaults" in (
        result.stdout
    )
    assert "# Metrics served at http://*:9539/metrics" in result.stdout
    assert "port = 9539" in result.stdout


def test_config_show_names_loaded_file(tmp_path, monkeypatch):
    path = tmp_path / "exporter.toml"
    write_settings(Settings(exporter=ExporterConfig(port=9600)), path)
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert f"# Loaded from {path}" in result.stdout
    assert "# Metrics served at http://*:9600/metrics" in result.stdout


def test_config_init_writes_file():
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 0
    assert default_config_path().exists()

    again = runner.invoke(app, ["config", "init"])
    assert again.exit_code == 1
    assert "pass --force to replace it" in again.stdout

    forced = runner.invoke(app, ["config", "init", "--force"])
    assert forced.exit_code == 0


def test_log_level_option_overrides_env(monkeypatch):
    levels: list[str | None] = []
    monkeypatch.setenv("MM_EXPORTER_LOG_LEVEL", "ERROR")
    monkeypatch.setattr(app_module, "setup_logging", levels.append)

    result = runner.invoke(app, ["--log-level", "debug", "--version"])

    assert result.exit_code == 0
    assert levels == ["debug"]


def test_missing_env_config_exits(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))

    result = runner.invoke(app, ["modems"])

    assert result.exit_code == 1


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (":9539", ("", 9539)),
        ("127.0.0.1:9100", ("127.0.0.1", 9100)),
        ("[::1]:9539", ("::1", 9539)),
    ],
)
def test_parse_address(value, expected):
    assert parse_address(value) == expected


@pytest.mark.parametrize("value", ["9539", "host:", "host:http", ":70000"])
def test_parse_address_rejects(value):
    with pytest.raises(ValueError):
        parse_address(value)


def test_modems_lists_table(monkeypatch, make_modem):
    monkeypatch.setenv("COLUMNS", "200")
    client = FakeClient(
        [
            make_modem(),
            make_modem(device_identifier="bar", index=1, state=ModemState.SEARCHING),
        ]
    )
    monkeypatch.setattr(modems_cmd, "ModemManagerClient", _fake_client_class(client))

    result = runner.invoke(app, ["modems"])

    assert result.exit_code == 0
    assert "ModemManager 1.14.0" in result.stdout
    assert "wwan0" in result.stdout
    assert "ttyUSB0" not in result.stdout
    assert "searching" in result.stdout
    assert "Found 2 modem(s)" in result.stdout
    assert client.closed


def test_modems_none_found(monkeypatch):
    client = FakeClient([])
    monkeypatch.setattr(modems_cmd, "ModemManagerClient", _fake_client_class(client))

    result = runner.invoke(app, ["modems"])

    assert result.exit_code == 0
    assert "No modems found." in result.stdout


def test_modems_connect_failure(monkeypatch):
    class _Client:
        @classmethod
        async def dial(cls, bus=None):
            raise FileNotFoundError("no system bus")

    monkeypatch.setattr(modems_cmd, "ModemManagerClient", _Client)

    result = runner.invoke(app, ["modems"])

    assert result.exit_code == 1


def test_serve_configures_modems_and_serves(tmp_path, monkeypatch, make_modem):
    config_path = tmp_path / "config.toml"
    write_settings(Settings(exporter=ExporterConfig(metrics_path="/scrape")), config_path)
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))

    modem = make_modem()
    client = FakeClient([modem])
    served: dict[str, object] = {}

    def fake_serve(wsgi_app, address, port):
        served["app"] = wsgi_app
        served["address"] = address
        served["port"] = port

    monkeypatch.setattr(serve_cmd, "ModemManagerClient", _fake_client_class(client))
    monkeypatch.setattr(serve_cmd, "serve", fake_serve)

    result = runner.invoke(app, ["serve", "--addr", "127.0.0.1:9100", "--rate", "10"])

    assert result.exit_code == 0
    assert served["address"] == "127.0.0.1"
    assert served["port"] == 9100
    assert modem.calls == ["setup:10.0"]


def test_serve_exits_when_setup_fails(monkeypatch, make_modem):
    from dbus_next.errors import DBusError

    class BrokenModem(make_modem):
        async def signal_setup(self, rate: float) -> None:
            raise DBusError("org.freedesktop.ModemManager1.Error.Core.Unsupported", "no")

    client = FakeClient([BrokenModem()])
    monkeypatch.setattr(serve_cmd, "ModemManagerClient", _fake_client_class(client))
    monkeypatch.setattr(serve_cmd, "serve", lambda *args: pytest.fail("served"))

    result = runner.invoke(app, ["serve"])

    assert result.exit_code == 1

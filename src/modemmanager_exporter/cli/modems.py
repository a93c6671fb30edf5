from __future__ import annotations

import asyncio
import logging

import typer
from dbus_next.errors import DBusError, InterfaceNotFoundError
from rich.console import Console
from rich.table import Table

from modemmanager_exporter.models import PortType
from modemmanager_exporter.modemmanager import Modem, ModemManagerClient

from .common import load_settings_or_exit

logger = logging.getLogger(__name__)


async def _list_modems(timeout: float) -> tuple[str, list[Modem]]:
    client = await asyncio.wait_for(ModemManagerClient.dial(), timeout=timeout)
    try:
        return client.version, await client.modems()
    finally:
        client.close()


def register(app: typer.Typer) -> None:
    @app.command()
    def modems() -> None:
        """List modems managed by ModemManager."""
        console = Console()
        settings = load_settings_or_exit()

        try:
            version, found = asyncio.run(
                _list_modems(settings.modemmanager.connect_timeout)
            )
        except (
            DBusError,
            InterfaceNotFoundError,
            OSError,
            TimeoutError,
        ) as exc:
            logger.error("Failed to connect to ModemManager: %s", exc)
            raise typer.Exit(1) from exc

        console.print(f"ModemManager {version}")

        if not found:
            console.print("No modems found.")
            return

        table = Table()
        table.add_column("Index", style="cyan")
        table.add_column("Device ID", style="green")
        table.add_column("Model")
        table.add_column("Firmware")
        table.add_column("IMEI")
        table.add_column("Power")
        table.add_column("State", style="yellow")
        table.add_column("Network ports")

        for modem in found:
            net_ports = [port.name for port in modem.ports if port.type == PortType.NET]
            table.add_row(
                str(modem.index),
                modem.device_identifier,
                modem.model,
                modem.revision,
                modem.equipment_identifier,
                modem.power_state.name.lower(),
                modem.state.name.lower(),
                ", ".join(net_ports),
            )

        console.print(table)
        console.print(f"\n[green]Found {len(found)} modem(s)[/green]")

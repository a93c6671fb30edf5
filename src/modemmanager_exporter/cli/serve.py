from __future__ import annotations

import asyncio
import logging

import typer
from dbus_next.errors import DBusError, InterfaceNotFoundError

from modemmanager_exporter.modemmanager import Modem, ModemManagerClient
from modemmanager_exporter.server import (
    build_registry,
    make_app,
    run_coroutine,
    serve,
    start_background_loop,
    stop_background_loop,
)

from .common import load_settings_or_exit, parse_address_or_exit

logger = logging.getLogger(__name__)


async def configure_modems(client: ModemManagerClient, rate: float) -> None:
    """Start extended signal polling on every modem."""

    async def setup(modem: Modem) -> None:
        logger.info("modem %d: %r", modem.index, modem.model)
        try:
            await modem.signal_setup(rate)
        except (DBusError, InterfaceNotFoundError) as exc:
            raise RuntimeError(f"failed to set signal refresh rate: {exc}") from exc

    await client.for_each_modem(setup)


def register(app: typer.Typer) -> None:
    @app.command(name="serve")
    def serve_command(
        addr: str | None = typer.Option(
            None,
            "--addr",
            help="Address for ModemManager exporter, e.g. ':9539'. Uses config if omitted.",
        ),
        rate: float | None = typer.Option(
            None,
            "--rate",
            min=1,
            help=(
                "How frequently ModemManager should poll each modem for its "
                "extended signal strength data, in seconds."
            ),
        ),
    ) -> None:
        """Serve Prometheus metrics for ModemManager and its modems."""
        settings = load_settings_or_exit()
        exporter = settings.exporter
        mm = settings.modemmanager

        if addr is None:
            address, port = exporter.address, exporter.port
        else:
            address, port = parse_address_or_exit(addr)
        signal_rate = rate if rate is not None else mm.signal_rate

        loop = start_background_loop()
        try:
            # Keep the D-Bus connection open for the lifetime of the program,
            # and use it immediately to start polling the modems for signal status.
            try:
                client = run_coroutine(
                    loop,
                    asyncio.wait_for(
                        ModemManagerClient.dial(), timeout=mm.connect_timeout
                    ),
                )
            except (
                DBusError,
                InterfaceNotFoundError,
                OSError,
                TimeoutError,
            ) as exc:
                logger.error("Failed to connect to ModemManager: %s", exc)
                raise typer.Exit(1) from exc

            try:
                try:
                    run_coroutine(
                        loop,
                        asyncio.wait_for(
                            configure_modems(client, signal_rate),
                            timeout=mm.connect_timeout,
                        ),
                    )
                except (DBusError, RuntimeError, TimeoutError) as exc:
                    logger.error("Failed to configure modems: %s", exc)
                    raise typer.Exit(1) from exc

                registry = build_registry(client, loop, mm.scrape_timeout)
                serve(make_app(registry, exporter.metrics_path), address, port)
            finally:
                loop.call_soon_threadsafe(client.close)
        except KeyboardInterrupt:
            logger.info("Shutting down")
        finally:
            stop_background_loop(loop)

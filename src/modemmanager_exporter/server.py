"""HTTP exposition of the exporter's registry."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Coroutine, Iterable, TypeVar
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.gc_collector import GCCollector
from prometheus_client.platform_collector import PlatformCollector
from prometheus_client.process_collector import ProcessCollector

from modemmanager_exporter.collector import ModemManagerCollector
from modemmanager_exporter.core import SCRAPE_TIMEOUT
from modemmanager_exporter.errors import ScrapeError
from modemmanager_exporter.models import ModemSource

logger = logging.getLogger(__name__)

T = TypeVar("T")

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]


def start_background_loop() -> asyncio.AbstractEventLoop:
    """Start an event loop in a daemon thread and return it."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(
        target=loop.run_forever, name="modemmanager-exporter-loop", daemon=True
    )
    thread.start()
    return loop


def stop_background_loop(loop: asyncio.AbstractEventLoop) -> None:
    loop.call_soon_threadsafe(loop.stop)


def run_coroutine(
    loop: asyncio.AbstractEventLoop, coro: Coroutine[Any, Any, T]
) -> T:
    return asyncio.run_coroutine_threadsafe(coro, loop).result()


def build_registry(
    source: ModemSource,
    loop: asyncio.AbstractEventLoop,
    timeout: float = SCRAPE_TIMEOUT,
) -> CollectorRegistry:
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    registry.register(ModemManagerCollector(source, loop, timeout))
    return registry


def make_app(registry: CollectorRegistry, metrics_path: str = "/metrics") -> WSGIApp:
    """Serve ``registry`` on ``metrics_path`` and redirect everything else there."""
    metrics_app = make_wsgi_app(registry)

    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "/") != metrics_path:
            start_response(
                "301 Moved Permanently",
                [("Location", metrics_path), ("Content-Length", "0")],
            )
            return [b""]

        try:
            return metrics_app(environ, start_response)
        except ScrapeError as exc:
            logger.error("Scrape failed: %s", exc)
            body = f"An error has occurred while serving metrics:\n\n{exc}\n".encode()
            start_response(
                "500 Internal Server Error",
                [
                    ("Content-Type", "text/plain; charset=utf-8"),
                    ("Content-Length", str(len(body))),
                ],
            )
            return [body]

    return app


class _RequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


def serve(app: WSGIApp, address: str, port: int) -> None:
    """Serve ``app`` until interrupted."""
    httpd = make_server(
        address,
        port,
        app,
        server_class=ThreadingWSGIServer,
        handler_class=_RequestHandler,
    )
    logger.info("Starting ModemManager exporter on %s:%d", address or "*", port)
    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()

"""modemmanager-exporter - Prometheus metrics for ModemManager and its modems."""

from __future__ import annotations

from importlib.metadata import version

from .config import ExporterConfig, ModemManagerConfig, Settings, get_settings
from .core import METRICS, Metric, scrape
from .errors import FetchError, ScrapeError, ScrapeTimeoutError, UnhandledMetricError
from .models import ModemState, Port, PortType, PowerState, Signal

__all__ = [
    "METRICS",
    "ExporterConfig",
    "FetchError",
    "Metric",
    "ModemManagerConfig",
    "ModemState",
    "Port",
    "PortType",
    "PowerState",
    "ScrapeError",
    "ScrapeTimeoutError",
    "Settings",
    "Signal",
    "UnhandledMetricError",
    "__version__",
    "get_settings",
    "scrape",
]

__version__ = version("modemmanager-exporter")

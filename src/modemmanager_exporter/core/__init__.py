from __future__ import annotations

from .encoding import (
    MODEM_STATES,
    POWER_STATES,
    EmitFunc,
    encode_enum,
    encode_network_ports,
)
from .schema import METRICS, NAMESPACE, Metric, MetricSpec
from .scrape import SCRAPE_TIMEOUT, collect_modem, emit_info, fetch_modem, scrape

__all__ = [
    "METRICS",
    "MODEM_STATES",
    "NAMESPACE",
    "POWER_STATES",
    "SCRAPE_TIMEOUT",
    "EmitFunc",
    "Metric",
    "MetricSpec",
    "collect_modem",
    "emit_info",
    "encode_enum",
    "encode_network_ports",
    "fetch_modem",
    "scrape",
]

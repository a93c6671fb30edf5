from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime
from typing import Mapping, assert_never

from modemmanager_exporter.errors import (
    FetchError,
    ScrapeError,
    ScrapeTimeoutError,
    UnhandledMetricError,
)
from modemmanager_exporter.models import Modem, ModemSource, Signal

from .encoding import (
    MODEM_STATES,
    POWER_STATES,
    EmitFunc,
    encode_enum,
    encode_network_ports,
)
from .schema import Metric

logger = logging.getLogger(__name__)

SCRAPE_TIMEOUT = 5.0


def _resolve(name: str) -> Metric:
    if isinstance(name, Metric):
        return name
    try:
        return Metric(name)
    except ValueError:
        raise UnhandledMetricError(
            f"modemmanager_exporter: unhandled metric {name!r}"
        ) from None


async def fetch_modem(modem: Modem) -> tuple[datetime, Signal]:
    """Perform the per-scrape calls a modem needs before any metric is exported."""
    device_id = modem.device_identifier
    try:
        now = await modem.get_network_time()
    except Exception as exc:
        raise FetchError("network time", device_id, exc) from exc

    try:
        signal = await modem.signal()
    except Exception as exc:
        raise FetchError("signal quality", device_id, exc) from exc

    return now, signal


def collect_modem(
    metrics: Mapping[str, EmitFunc],
    modem: Modem,
    now: datetime,
    signal: Signal,
) -> None:
    """Emit every per-modem sample for an already fetched modem."""
    device_id = modem.device_identifier
    lte = signal.lte

    for name, emit in metrics.items():
        metric = _resolve(name)
        match metric:
            case Metric.INFO:
                # Emitted once per scrape by emit_info.
                pass
            case Metric.MODEM_INFO:
                emit(
                    1.0,
                    device_id,
                    modem.revision,
                    modem.equipment_identifier,
                    modem.model,
                )
            case Metric.MODEM_NETWORK_PORT_INFO:
                encode_network_ports(emit, device_id, modem.ports)
            case Metric.MODEM_NETWORK_TIMESTAMP:
                emit(float(math.floor(now.timestamp())), device_id)
            case Metric.MODEM_POWER_STATE:
                encode_enum(emit, device_id, POWER_STATES, modem.power_state)
            case Metric.MODEM_STATE:
                encode_enum(emit, device_id, MODEM_STATES, modem.state)
            case Metric.MODEM_SIGNAL_LTE_RSRQ:
                emit(lte.rsrq, device_id)
            case Metric.MODEM_SIGNAL_LTE_RSRP:
                emit(lte.rsrp, device_id)
            case Metric.MODEM_SIGNAL_LTE_RSSI:
                emit(lte.rssi, device_id)
            case Metric.MODEM_SIGNAL_LTE_SNR:
                emit(lte.snr, device_id)
            case _:
                assert_never(metric)


def emit_info(metrics: Mapping[str, EmitFunc], version: str) -> None:
    """Emit the single daemon metadata sample for a successful scrape."""
    metrics[Metric.INFO](1.0, version)


async def scrape(
    metrics: Mapping[str, EmitFunc],
    source: ModemSource,
    timeout: float = SCRAPE_TIMEOUT,
) -> None:
    """Export one sample set for every modem known to ``source``.

    The first modem whose network time or signal cannot be fetched aborts the
    whole scrape with a :class:`ScrapeError`; no samples are emitted for that
    modem and no further modems are visited. Exceeding ``timeout`` cancels the
    outstanding calls and raises :class:`ScrapeTimeoutError`.

    The daemon metadata sample is emitted after the modems so that it is present
    even when no modems are detected.
    """
    count = 0

    async def on_modem(modem: Modem) -> None:
        nonlocal count
        now, signal = await fetch_modem(modem)
        collect_modem(metrics, modem, now, signal)
        count += 1

    deadline = asyncio.timeout(timeout)
    try:
        async with deadline:
            await source.for_each_modem(on_modem)
    except UnhandledMetricError:
        raise
    except TimeoutError as exc:
        if not deadline.expired():
            # Raised by the source itself, not by the scrape budget.
            raise ScrapeError(Metric.INFO, exc) from exc
        raise ScrapeTimeoutError(
            Metric.INFO, TimeoutError(f"scrape exceeded {timeout:.2f}s")
        ) from exc
    except Exception as exc:
        raise ScrapeError(Metric.INFO, exc) from exc

    emit_info(metrics, source.version)
    logger.debug("Scrape complete: exported %d modems", count)

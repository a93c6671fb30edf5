"""Prometheus collector backed by a modem source."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Iterable

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from modemmanager_exporter.core import METRICS, SCRAPE_TIMEOUT, EmitFunc, scrape
from modemmanager_exporter.errors import UnhandledMetricError
from modemmanager_exporter.models import ModemSource

logger = logging.getLogger(__name__)

# Exit status used when schema drift aborts the process.
FATAL_EXIT_CODE = 2


def _families() -> dict[str, GaugeMetricFamily]:
    return {
        spec.name: GaugeMetricFamily(
            spec.name, spec.documentation, labels=list(spec.labels)
        )
        for spec in METRICS.values()
    }


def _emitter(family: GaugeMetricFamily) -> EmitFunc:
    def emit(value: float, *labels: str) -> None:
        family.add_metric(list(labels), value)

    return emit


class ModemManagerCollector(Collector):
    """Scrapes every modem on each collection.

    The scrape coroutine runs on ``loop``, which must be running in another
    thread; ``collect`` blocks until it finishes. Families are only yielded
    once the whole scrape succeeded, so a failed scrape exposes nothing.
    """

    def __init__(
        self,
        source: ModemSource,
        loop: asyncio.AbstractEventLoop,
        timeout: float = SCRAPE_TIMEOUT,
    ) -> None:
        self._source = source
        self._loop = loop
        self._timeout = timeout

    def describe(self) -> Iterable[GaugeMetricFamily]:
        return list(_families().values())

    def collect(self) -> Iterable[GaugeMetricFamily]:
        families = _families()
        emitters = {name: _emitter(family) for name, family in families.items()}

        future = asyncio.run_coroutine_threadsafe(
            scrape(emitters, self._source, self._timeout), self._loop
        )
        try:
            future.result()
        except UnhandledMetricError as exc:
            # The catalog and the dispatch disagree: a programming error that
            # must not be served as an ordinary failed scrape.
            logger.critical("Aborting: %s", exc)
            logging.shutdown()
            os._exit(FATAL_EXIT_CODE)

        yield from families.values()

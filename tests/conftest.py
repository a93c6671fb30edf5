from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest

from modemmanager_exporter.config import get_settings
from modemmanager_exporter.core import METRICS, Metric
from modemmanager_exporter.models import (
    LteSignal,
    ModemState,
    Port,
    PortType,
    PowerState,
    Signal,
)


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.delenv("MM_EXPORTER_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@dataclass
class FakeModem:
    device_identifier: str = "foo"
    equipment_identifier: str = "deadbeef"
    model: str = "Test Modem"
    revision: str = "2020-07-17"
    power_state: PowerState = PowerState.ON
    state: ModemState = ModemState.CONNECTED
    ports: tuple[Port, ...] = (
        Port(name="ttyUSB0", type=PortType.AT),
        Port(name="wwan0", type=PortType.NET),
    )
    index: int = 0
    network_time: datetime = datetime.fromtimestamp(1, tz=timezone.utc)
    lte: LteSignal = LteSignal(rsrp=-116, rsrq=-17, rssi=-81, snr=1)
    time_error: Exception | None = None
    signal_error: Exception | None = None
    delay: float = 0.0
    calls: list[str] = field(default_factory=list)

    async def get_network_time(self) -> datetime:
        self.calls.append("network_time")
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.time_error is not None:
            raise self.time_error
        return self.network_time

    async def signal(self) -> Signal:
        self.calls.append("signal")
        if self.signal_error is not None:
            raise self.signal_error
        return Signal(rate=5, lte=self.lte)

    async def signal_setup(self, rate: float) -> None:
        self.calls.append(f"setup:{rate}")


@dataclass
class FakeSource:
    modems: list[FakeModem] = field(default_factory=list)
    version: str = "1.14.0"
    visited: list[str] = field(default_factory=list)

    async def for_each_modem(self, fn) -> None:
        for modem in self.modems:
            self.visited.append(modem.device_identifier)
            await fn(modem)


class MemorySink:
    """Records samples as {metric name: {"label=value,...": value}}."""

    def __init__(self) -> None:
        self.series: dict[str, dict[str, float]] = {
            spec.name: {} for spec in METRICS.values()
        }

    def emitters(self) -> dict[str, object]:
        return {name: self._emitter(name) for name in self.series}

    def _emitter(self, name: str):
        label_names = METRICS[Metric(name)].labels

        def emit(value: float, *labels: str) -> None:
            assert len(labels) == len(label_names)
            key = ",".join(f"{k}={v}" for k, v in zip(label_names, labels))
            assert key not in self.series[name], f"duplicate sample {name}{{{key}}}"
            self.series[name][key] = value

        return emit

    def samples(self) -> int:
        return sum(len(values) for values in self.series.values())


@pytest.fixture
def make_modem():
    return FakeModem


@pytest.fixture
def make_source():
    return FakeSource


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def make_sink():
    return MemorySink


@pytest.fixture
def background_loop():
    from modemmanager_exporter.server import start_background_loop, stop_background_loop

    loop = start_background_loop()
    yield loop
    stop_background_loop(loop)

"""Modem models."""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum
from typing import Awaitable, Callable, Protocol, Sequence

from pydantic import BaseModel


class PowerState(IntEnum):
    """MMModemPowerState."""

    UNKNOWN = 0
    OFF = 1
    LOW = 2
    ON = 3


class ModemState(IntEnum):
    """MMModemState."""

    FAILED = -1
    UNKNOWN = 0
    INITIALIZING = 1
    LOCKED = 2
    DISABLED = 3
    DISABLING = 4
    ENABLING = 5
    ENABLED = 6
    SEARCHING = 7
    REGISTERED = 8
    DISCONNECTING = 9
    CONNECTING = 10
    CONNECTED = 11


class PortType(IntEnum):
    """MMModemPortType."""

    UNKNOWN = 1
    NET = 2
    AT = 3
    QCDM = 4
    GPS = 5
    QMI = 6
    MBIM = 7
    AUDIO = 8
    IGNORED = 9


class Port(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    name: str
    type: PortType


class LteSignal(BaseModel):
    """LTE signal readings, zero when not reported."""

    model_config = {"frozen": True, "extra": "forbid"}

    rsrq: float = 0.0
    rsrp: float = 0.0
    rssi: float = 0.0
    snr: float = 0.0


class Signal(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    rate: int = 0
    lte: LteSignal = LteSignal()


class Modem(Protocol):
    """A modem as seen during a single scrape."""

    index: int
    device_identifier: str
    equipment_identifier: str
    model: str
    revision: str
    power_state: PowerState
    state: ModemState
    ports: Sequence[Port]

    async def get_network_time(self) -> datetime: ...

    async def signal(self) -> Signal: ...


class ModemSource(Protocol):
    """Something that can enumerate the currently known modems."""

    @property
    def version(self) -> str: ...

    async def for_each_modem(self, fn: Callable[[Modem], Awaitable[None]]) -> None: ...

"""ModemManager D-Bus client.

Only the small read-mostly subset the exporter needs is implemented: the daemon
version, modem enumeration through the ObjectManager, the network clock and the
extended signal readings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping, Protocol

from dbus_next import BusType, Variant
from dbus_next.aio import MessageBus

from modemmanager_exporter.models import (
    LteSignal,
    ModemState,
    Port,
    PortType,
    PowerState,
    Signal,
)

logger = logging.getLogger(__name__)

MM_SERVICE = "org.freedesktop.ModemManager1"
MM_PATH = "/org/freedesktop/ModemManager1"
MM_IFACE = "org.freedesktop.ModemManager1"
MODEM_IFACE = "org.freedesktop.ModemManager1.Modem"
MODEM_SIGNAL_IFACE = "org.freedesktop.ModemManager1.Modem.Signal"
MODEM_TIME_IFACE = "org.freedesktop.ModemManager1.Modem.Time"
OBJECT_MANAGER_IFACE = "org.freedesktop.DBus.ObjectManager"


class InterfaceProvider(Protocol):
    def get_interface(self, name: str) -> Any: ...


def _unwrap(value: Any) -> Any:
    if isinstance(value, Variant):
        return value.value
    return value


def _modem_index(path: str) -> int:
    try:
        return int(path.rsplit("/", 1)[-1])
    except ValueError:
        return -1


def _enum_value(enum: type, raw: Any, default: Any) -> Any:
    try:
        return enum(int(raw))
    except (TypeError, ValueError):
        return default


def parse_ports(raw: Any) -> tuple[Port, ...]:
    ports: list[Port] = []
    for name, port_type in _unwrap(raw) or []:
        ports.append(
            Port(name=name, type=_enum_value(PortType, port_type, PortType.UNKNOWN))
        )
    return tuple(ports)


def parse_network_time(value: str) -> datetime:
    """Parse a ModemManager ISO 8601 network time; naive values are UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_signal(rate: Any, lte: Mapping[str, Any] | None) -> Signal:
    readings = {key: float(_unwrap(value)) for key, value in (lte or {}).items()}
    return Signal(
        rate=int(_unwrap(rate) or 0),
        lte=LteSignal(
            rsrq=readings.get("rsrq", 0.0),
            rsrp=readings.get("rsrp", 0.0),
            rssi=readings.get("rssi", 0.0),
            snr=readings.get("snr", 0.0),
        ),
    )


@dataclass(frozen=True)
class Modem:
    """A ModemManager modem, its properties captured at enumeration time."""

    index: int
    path: str
    device_identifier: str
    equipment_identifier: str
    manufacturer: str
    model: str
    revision: str
    power_state: PowerState
    state: ModemState
    ports: tuple[Port, ...]
    _proxy: InterfaceProvider = field(repr=False, compare=False)

    async def get_network_time(self) -> datetime:
        iface = self._proxy.get_interface(MODEM_TIME_IFACE)
        return parse_network_time(await iface.call_get_network_time())

    async def signal(self) -> Signal:
        iface = self._proxy.get_interface(MODEM_SIGNAL_IFACE)
        rate = await iface.get_rate()
        lte = await iface.get_lte()
        return parse_signal(rate, lte)

    async def signal_setup(self, rate: float) -> None:
        """Ask ModemManager to poll extended signal data every ``rate`` seconds."""
        iface = self._proxy.get_interface(MODEM_SIGNAL_IFACE)
        await iface.call_setup(max(int(rate), 1))


def modem_from_properties(
    path: str, properties: Mapping[str, Any], proxy: InterfaceProvider
) -> Modem:
    def prop(name: str, default: Any = "") -> Any:
        value = _unwrap(properties.get(name, default))
        return default if value is None else value

    return Modem(
        index=_modem_index(path),
        path=path,
        device_identifier=prop("DeviceIdentifier"),
        equipment_identifier=prop("EquipmentIdentifier"),
        manufacturer=prop("Manufacturer"),
        model=prop("Model"),
        revision=prop("Revision"),
        power_state=_enum_value(
            PowerState, prop("PowerState", 0), PowerState.UNKNOWN
        ),
        state=_enum_value(ModemState, prop("State", 0), ModemState.UNKNOWN),
        ports=parse_ports(prop("Ports", [])),
        _proxy=proxy,
    )


class ModemManagerClient:
    def __init__(self, bus: MessageBus, manager: Any, objects: Any, version: str) -> None:
        self._bus = bus
        self._manager = manager
        self._objects = objects
        self._version = version

    @classmethod
    async def dial(cls, bus: MessageBus | None = None) -> ModemManagerClient:
        """Connect to ModemManager on the system bus."""
        if bus is None:
            bus = await MessageBus(bus_type=BusType.SYSTEM).connect()

        introspection = await bus.introspect(MM_SERVICE, MM_PATH)
        proxy = bus.get_proxy_object(MM_SERVICE, MM_PATH, introspection)
        manager = proxy.get_interface(MM_IFACE)
        objects = proxy.get_interface(OBJECT_MANAGER_IFACE)
        version = await manager.get_version()
        logger.debug("Connected to ModemManager %s", version)
        return cls(bus, manager, objects, version)

    @property
    def version(self) -> str:
        return self._version

    async def modems(self) -> list[Modem]:
        managed = await self._objects.call_get_managed_objects()

        found: list[Modem] = []
        for path, interfaces in managed.items():
            properties = interfaces.get(MODEM_IFACE)
            if properties is None:
                continue
            introspection = await self._bus.introspect(MM_SERVICE, path)
            proxy = self._bus.get_proxy_object(MM_SERVICE, path, introspection)
            found.append(modem_from_properties(path, properties, proxy))

        found.sort(key=lambda modem: modem.index)
        return found

    async def for_each_modem(self, fn: Callable[[Modem], Awaitable[None]]) -> None:
        """Call ``fn`` for every modem; the first error stops iteration."""
        for modem in await self.modems():
            await fn(modem)

    def close(self) -> None:
        self._bus.disconnect()

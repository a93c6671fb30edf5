from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from modemmanager_exporter.models import ModemState, Port, PortType, PowerState

EmitFunc = Callable[..., None]

E = TypeVar("E")

POWER_STATES: tuple[tuple[str, PowerState], ...] = (
    ("unknown", PowerState.UNKNOWN),
    ("off", PowerState.OFF),
    ("low", PowerState.LOW),
    ("on", PowerState.ON),
)

# ModemState.INITIALIZING is not exported and encodes as all zeros.
MODEM_STATES: tuple[tuple[str, ModemState], ...] = (
    ("failed", ModemState.FAILED),
    ("unknown", ModemState.UNKNOWN),
    ("locked", ModemState.LOCKED),
    ("disabled", ModemState.DISABLED),
    ("disabling", ModemState.DISABLING),
    ("enabling", ModemState.ENABLING),
    ("enabled", ModemState.ENABLED),
    ("searching", ModemState.SEARCHING),
    ("registered", ModemState.REGISTERED),
    ("disconnecting", ModemState.DISCONNECTING),
    ("connecting", ModemState.CONNECTING),
    ("connected", ModemState.CONNECTED),
)


def encode_enum(
    emit: EmitFunc,
    device_id: str,
    domain: Sequence[tuple[str, E]],
    active: E,
) -> None:
    """Emit one sample per domain member, 1.0 for the active one and 0.0 otherwise."""
    for label, member in domain:
        emit(1.0 if member == active else 0.0, device_id, label)


def encode_network_ports(emit: EmitFunc, device_id: str, ports: Sequence[Port]) -> None:
    """Emit one sample per network interface port.

    Other port types (AT, QMI, MBIM, ...) produce no sample at all; only network
    interfaces can be joined against other exporters such as node_exporter.
    """
    for port in ports:
        if port.type != PortType.NET:
            continue
        emit(1.0, device_id, port.name)

"""Data models for modemmanager-exporter."""

from modemmanager_exporter.models.modem import (
    LteSignal,
    Modem,
    ModemSource,
    ModemState,
    Port,
    PortType,
    PowerState,
    Signal,
)

__all__ = [
    "LteSignal",
    "Modem",
    "ModemSource",
    "ModemState",
    "Port",
    "PortType",
    "PowerState",
    "Signal",
]

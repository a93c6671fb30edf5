from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

NAMESPACE = "modemmanager"


class Metric(StrEnum):
    INFO = f"{NAMESPACE}_info"
    MODEM_INFO = f"{NAMESPACE}_modem_info"
    MODEM_NETWORK_PORT_INFO = f"{NAMESPACE}_modem_network_port_info"
    MODEM_NETWORK_TIMESTAMP = f"{NAMESPACE}_modem_network_timestamp_seconds"
    MODEM_POWER_STATE = f"{NAMESPACE}_modem_power_state"
    MODEM_STATE = f"{NAMESPACE}_modem_state"
    MODEM_SIGNAL_LTE_RSRQ = f"{NAMESPACE}_modem_signal_lte_rsrq_db"
    MODEM_SIGNAL_LTE_RSRP = f"{NAMESPACE}_modem_signal_lte_rsrp_dbm"
    MODEM_SIGNAL_LTE_RSSI = f"{NAMESPACE}_modem_signal_lte_rssi_dbm"
    MODEM_SIGNAL_LTE_SNR = f"{NAMESPACE}_modem_signal_lte_snr_db"


@dataclass(frozen=True)
class MetricSpec:
    name: str
    documentation: str
    labels: tuple[str, ...]


def _spec(metric: Metric, documentation: str, *labels: str) -> MetricSpec:
    return MetricSpec(name=metric.value, documentation=documentation, labels=labels)


METRICS: dict[Metric, MetricSpec] = {
    Metric.INFO: _spec(
        Metric.INFO,
        "Metadata about the ModemManager daemon.",
        "version",
    ),
    Metric.MODEM_INFO: _spec(
        Metric.MODEM_INFO,
        "Metadata about a managed modem.",
        "device_id",
        "firmware",
        "imei",
        "model",
    ),
    Metric.MODEM_NETWORK_PORT_INFO: _spec(
        Metric.MODEM_NETWORK_PORT_INFO,
        "Metadata about the attached network interface ports for a modem. "
        "Note that device refers to the network interface name, "
        "and not the modem name.",
        "device_id",
        "device",
    ),
    Metric.MODEM_NETWORK_TIMESTAMP: _spec(
        Metric.MODEM_NETWORK_TIMESTAMP,
        "The current UNIX timestamp as reported by a modem's cellular network.",
        "device_id",
    ),
    Metric.MODEM_POWER_STATE: _spec(
        Metric.MODEM_POWER_STATE,
        "An enumeration of power states for a modem, "
        "where a value of 1 indicates the current state.",
        "device_id",
        "state",
    ),
    Metric.MODEM_STATE: _spec(
        Metric.MODEM_STATE,
        "An enumeration of cellular connection states for a modem, "
        "where a value of 1 indicates the current state.",
        "device_id",
        "state",
    ),
    Metric.MODEM_SIGNAL_LTE_RSRQ: _spec(
        Metric.MODEM_SIGNAL_LTE_RSRQ,
        "A modem's current LTE signal RSRQ (Reference Signal Received Quality) in dB.",
        "device_id",
    ),
    Metric.MODEM_SIGNAL_LTE_RSRP: _spec(
        Metric.MODEM_SIGNAL_LTE_RSRP,
        "A modem's current LTE signal RSRP (Reference Signal Received Power) in dBm.",
        "device_id",
    ),
    Metric.MODEM_SIGNAL_LTE_RSSI: _spec(
        Metric.MODEM_SIGNAL_LTE_RSSI,
        "A modem's current LTE signal RSSI "
        "(Received Signal Strength Indication) in dBm.",
        "device_id",
    ),
    Metric.MODEM_SIGNAL_LTE_SNR: _spec(
        Metric.MODEM_SIGNAL_LTE_SNR,
        "A modem's current LTE signal SNR (Signal-to-Noise Ratio) in dB.",
        "device_id",
    ),
}

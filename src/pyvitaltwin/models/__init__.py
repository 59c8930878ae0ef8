"""Typed models for telemetry payloads and engine snapshots."""

from pyvitaltwin.models.anomaly import Anomaly
from pyvitaltwin.models.device import DeviceStatus
from pyvitaltwin.models.reading import TelemetryReading
from pyvitaltwin.models.snapshot import FetchFailure, TelemetryEndpoint, TelemetrySnapshot

__all__ = [
    "Anomaly",
    "DeviceStatus",
    "FetchFailure",
    "TelemetryEndpoint",
    "TelemetryReading",
    "TelemetrySnapshot",
]

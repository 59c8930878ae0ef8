"""pyvitaltwin - Async telemetry synchronization engine for animal-health monitoring."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyvitaltwin")
except PackageNotFoundError:
    __version__ = "0+local"
from pyvitaltwin.classify import (
    ReadingAssessment,
    Severity,
    VitalStatus,
    classify_heart_rate,
    classify_reading,
    classify_temperature,
)
from pyvitaltwin.client import TwinClient
from pyvitaltwin.config import TwinConfig
from pyvitaltwin.exceptions import (
    TwinConfigError,
    TwinError,
    TwinFetchError,
    TwinProtocolError,
    TwinTransportError,
)
from pyvitaltwin.models import (
    Anomaly,
    DeviceStatus,
    FetchFailure,
    TelemetryEndpoint,
    TelemetryReading,
    TelemetrySnapshot,
)
from pyvitaltwin.poller import PollerState, TelemetryPoller
from pyvitaltwin.state.buffer import BoundedSequence

__all__ = [
    "__version__",
    "Anomaly",
    "BoundedSequence",
    "DeviceStatus",
    "FetchFailure",
    "PollerState",
    "ReadingAssessment",
    "Severity",
    "TelemetryEndpoint",
    "TelemetryPoller",
    "TelemetryReading",
    "TelemetrySnapshot",
    "TwinClient",
    "TwinConfig",
    "TwinConfigError",
    "TwinError",
    "TwinFetchError",
    "TwinProtocolError",
    "TwinTransportError",
    "VitalStatus",
    "classify_heart_rate",
    "classify_reading",
    "classify_temperature",
]

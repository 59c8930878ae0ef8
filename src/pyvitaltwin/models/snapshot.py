"""Immutable aggregate view published by the telemetry poller."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pyvitaltwin.models.anomaly import Anomaly
from pyvitaltwin.models.device import DeviceStatus
from pyvitaltwin.models.reading import TelemetryReading


class TelemetryEndpoint(StrEnum):
    """Remote endpoints the engine reads from."""

    LATEST = "latest"
    HISTORY = "history"
    ANOMALIES = "anomalies"
    DEVICE_STATUS = "device_status"


class FetchFailure(BaseModel):
    """Diagnostics record for the most recent failed fetch."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    endpoint: TelemetryEndpoint
    message: str
    occurred_at: datetime


class TelemetrySnapshot(BaseModel):
    """Point-in-time view of everything the engine currently knows.

    Fields are "current per field": ``latest``, ``anomalies`` and
    ``device_status`` may originate from different round-trips when one
    of the fetches in a cycle failed. ``stale`` lists the endpoints whose
    most recent fetch failed, so their slice is showing an older value.

    Parameters
    ----------
    history : tuple of TelemetryReading
        Sliding window of readings, oldest first.
    latest : TelemetryReading or None
        Most recent reading, ``None`` until one has been fetched.
    anomalies : tuple of Anomaly
        Server's most recent anomalies, in server order.
    device_status : DeviceStatus or None
        Last successfully fetched device status.
    loading : bool
        ``True`` until the bootstrap (history fill plus first cycle) is done.
    stale : frozenset of TelemetryEndpoint
        Endpoints whose last fetch failed.
    last_error : FetchFailure or None
        Most recent fetch failure, kept until a later one replaces it.
    cycle : int
        Number of completed fetch cycles.
    published_at : datetime or None
        When the snapshot was published.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    history: tuple[TelemetryReading, ...] = ()
    latest: TelemetryReading | None = None
    anomalies: tuple[Anomaly, ...] = ()
    device_status: DeviceStatus | None = None
    loading: bool = True
    stale: frozenset[TelemetryEndpoint] = Field(default_factory=frozenset)
    last_error: FetchFailure | None = None
    cycle: int = 0
    published_at: datetime | None = None

    def is_stale(self, endpoint: TelemetryEndpoint) -> bool:
        """Return ``True`` if the slice fed by *endpoint* missed its last update."""
        return endpoint in self.stale

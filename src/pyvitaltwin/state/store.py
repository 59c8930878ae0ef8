"""In-memory telemetry state and snapshot construction.

The poller is the only writer. Every mutator here is synchronous, so a
sequence of calls between two ``await`` points can never interleave with
another coroutine.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from pyvitaltwin.models.anomaly import Anomaly
from pyvitaltwin.models.device import DeviceStatus
from pyvitaltwin.models.reading import TelemetryReading
from pyvitaltwin.models.snapshot import FetchFailure, TelemetryEndpoint, TelemetrySnapshot
from pyvitaltwin.state.buffer import BoundedSequence
from pyvitaltwin.state.device import DeviceStatusTracker


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TelemetryStore:
    """Bounded history, anomaly mirror, device status and freshness flags."""

    def __init__(
        self,
        *,
        history_capacity: int,
        anomaly_capacity: int,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self.history: BoundedSequence[TelemetryReading] = BoundedSequence(history_capacity)
        self.anomalies: BoundedSequence[Anomaly] = BoundedSequence(anomaly_capacity)
        self.device = DeviceStatusTracker()
        self._latest: TelemetryReading | None = None
        self._stale: set[TelemetryEndpoint] = set()
        self._last_error: FetchFailure | None = None

    @property
    def latest(self) -> TelemetryReading | None:
        return self._latest

    @property
    def last_error(self) -> FetchFailure | None:
        return self._last_error

    def seed_history(self, readings: Iterable[TelemetryReading]) -> None:
        """Fill the history window from a bootstrap fetch (last ``capacity`` kept)."""
        self.history.replace(readings)

    def apply_latest(self, reading: TelemetryReading) -> None:
        self._latest = reading
        self.history.append(reading)
        self._stale.discard(TelemetryEndpoint.LATEST)

    def apply_anomalies(self, anomalies: Iterable[Anomaly]) -> None:
        """Mirror the server's most recent anomalies, in the order returned."""
        self.anomalies.replace(anomalies)
        self._stale.discard(TelemetryEndpoint.ANOMALIES)

    def apply_device_status(self, status: DeviceStatus) -> None:
        self.device.update(status)
        self._stale.discard(TelemetryEndpoint.DEVICE_STATUS)

    def record_failure(self, endpoint: TelemetryEndpoint, message: str, *, stale: bool = True) -> FetchFailure:
        """Remember a failed fetch and, by default, mark *endpoint* stale.

        The slice of state fed by *endpoint* is left untouched.
        """
        failure = FetchFailure(endpoint=endpoint, message=message, occurred_at=self._clock())
        if stale:
            self._stale.add(endpoint)
        self._last_error = failure
        return failure

    def snapshot(self, *, loading: bool, cycle: int) -> TelemetrySnapshot:
        """Build an immutable snapshot of the current state."""
        return TelemetrySnapshot(
            history=self.history.to_ordered_sequence(),
            latest=self._latest,
            anomalies=self.anomalies.to_ordered_sequence(),
            device_status=self.device.current(),
            loading=loading,
            stale=frozenset(self._stale),
            last_error=self._last_error,
            cycle=cycle,
            published_at=self._clock(),
        )

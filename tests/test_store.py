from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pyvitaltwin.models import Anomaly, DeviceStatus, TelemetryEndpoint, TelemetryReading
from pyvitaltwin.state.device import DeviceStatusTracker
from pyvitaltwin.state.store import TelemetryStore


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _reading(temperature: float) -> TelemetryReading:
    return TelemetryReading(temperature=temperature, heart_rate=90.0, timestamp=_dt())


def _store() -> TelemetryStore:
    return TelemetryStore(history_capacity=3, anomaly_capacity=2, clock=_dt)


def test_latest_is_set_and_appended_to_history() -> None:
    store = _store()
    store.seed_history([_reading(37.6), _reading(37.7)])

    store.apply_latest(_reading(38.0))
    store.apply_latest(_reading(38.1))

    assert store.latest is not None
    assert store.latest.temperature == 38.1
    assert [r.temperature for r in store.history] == [37.7, 38.0, 38.1]


def test_anomalies_mirror_the_last_entries_in_server_order() -> None:
    store = _store()
    anomalies = [
        Anomaly(kind="temperatura", subtype="fiebre", value=39.3 + i, normal_range="37.5-39.2", timestamp=_dt())
        for i in range(4)
    ]

    store.apply_anomalies(anomalies[:1])
    store.apply_anomalies(anomalies)

    assert [a.value for a in store.anomalies] == pytest.approx([41.3, 42.3])


def test_failure_marks_stale_until_next_success() -> None:
    store = _store()

    failure = store.record_failure(TelemetryEndpoint.DEVICE_STATUS, "HTTP 502")
    snapshot = store.snapshot(loading=False, cycle=1)

    assert snapshot.stale == frozenset({TelemetryEndpoint.DEVICE_STATUS})
    assert snapshot.last_error == failure
    assert failure.occurred_at == _dt()

    store.apply_device_status(DeviceStatus(online=True, battery_level=50))
    snapshot = store.snapshot(loading=False, cycle=2)

    assert snapshot.stale == frozenset()
    # The last error stays available for diagnostics.
    assert snapshot.last_error == failure


def test_failure_without_stale_flag() -> None:
    store = _store()
    store.record_failure(TelemetryEndpoint.HISTORY, "timeout", stale=False)

    snapshot = store.snapshot(loading=True, cycle=0)

    assert snapshot.stale == frozenset()
    assert snapshot.last_error is not None
    assert snapshot.last_error.endpoint is TelemetryEndpoint.HISTORY


def test_snapshot_is_detached_from_live_buffers() -> None:
    store = _store()
    store.apply_latest(_reading(38.0))

    snapshot = store.snapshot(loading=False, cycle=1)
    store.apply_latest(_reading(39.0))

    assert isinstance(snapshot.history, tuple)
    assert [r.temperature for r in snapshot.history] == [38.0]


def test_tracker_replaces_wholesale() -> None:
    tracker = DeviceStatusTracker()
    assert tracker.current() is None

    tracker.update(DeviceStatus(device_id="A", online=True, battery_level=90, signal_strength="good"))
    tracker.update(DeviceStatus(online=False, battery_level=10))

    current = tracker.current()
    assert current is not None
    assert current.online is False
    # No merge with the previous status.
    assert current.device_id == ""
    assert current.signal_strength == ""

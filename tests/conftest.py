from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from pyvitaltwin._constants import ANOMALIES_PATH, DEVICE_STATUS_PATH, HISTORY_PATH, LATEST_READING_PATH
from pyvitaltwin.client import TwinClient
from pyvitaltwin.config import TwinConfig

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def reading_payload(temperature: float, heart_rate: float, seconds: int = 0) -> dict[str, Any]:
    """Reading as the telemetry server sends it."""
    return {
        "temperatura_celsius": temperature,
        "frecuencia_cardiaca_lpm": heart_rate,
        "timestamp": (BASE_TIME + timedelta(seconds=seconds)).isoformat(),
    }


def anomaly_payload(index: int, subtype: str = "fiebre") -> dict[str, Any]:
    return {
        "type": "temperatura",
        "subtype": subtype,
        "value": 39.5 + index / 10,
        "normal_range": "37.5-39.2",
        "timestamp": (BASE_TIME + timedelta(seconds=index)).isoformat(),
    }


def status_payload(*, online: bool = True, battery: int = 80) -> dict[str, Any]:
    return {
        "device_id": "COLLAR-001",
        "online": online,
        "battery_level": battery,
        "signal_strength": "good",
    }


@dataclass
class FakeTelemetryBackend:
    """In-memory stand-in for the telemetry API, implementing ``Transport``."""

    history: list[dict[str, Any]] = field(default_factory=list)
    latest: dict[str, Any] = field(default_factory=lambda: reading_payload(38.0, 90.0))
    anomalies: list[dict[str, Any]] = field(default_factory=list)
    device_status: dict[str, Any] = field(default_factory=status_payload)
    failures: dict[str, Exception] = field(default_factory=dict)
    bodies: dict[str, Any] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    delays: dict[str, float] = field(default_factory=dict)
    calls: dict[str, int] = field(default_factory=dict)
    active: dict[str, int] = field(default_factory=dict)
    max_active: dict[str, int] = field(default_factory=dict)

    async def get_json(self, endpoint: str) -> Any:
        self.calls[endpoint] = self.calls.get(endpoint, 0) + 1
        self.active[endpoint] = self.active.get(endpoint, 0) + 1
        self.max_active[endpoint] = max(self.max_active.get(endpoint, 0), self.active[endpoint])
        try:
            gate = self.gates.get(endpoint)
            if gate is not None:
                await gate.wait()
            delay = self.delays.get(endpoint)
            if delay:
                await asyncio.sleep(delay)
            return self._respond(endpoint)
        finally:
            self.active[endpoint] -= 1

    def _respond(self, endpoint: str) -> Any:
        if endpoint in self.failures:
            raise self.failures[endpoint]
        if endpoint in self.bodies:
            return self.bodies[endpoint]
        if endpoint == LATEST_READING_PATH:
            return {"success": True, "data": self.latest}
        if endpoint == HISTORY_PATH:
            return {"success": True, "data": self.history}
        if endpoint == ANOMALIES_PATH:
            return {"success": True, "anomalies": self.anomalies}
        if endpoint == DEVICE_STATUS_PATH:
            return {"success": True, "device_status": self.device_status}
        raise AssertionError(f"Unexpected endpoint in fake backend: {endpoint}")


@pytest.fixture
def backend() -> FakeTelemetryBackend:
    return FakeTelemetryBackend()


@pytest.fixture
def config() -> TwinConfig:
    # Long interval: the scheduler never fires on its own unless a test asks for it.
    return TwinConfig(base_url="http://telemetry.test", poll_interval=60.0)


@pytest.fixture
def client(config: TwinConfig, backend: FakeTelemetryBackend) -> TwinClient:
    return TwinClient(config, transport=backend)

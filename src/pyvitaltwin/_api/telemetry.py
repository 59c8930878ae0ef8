"""Telemetry read endpoints.

Endpoints:
  - /api/iot/data/latest (latest reading)
  - /api/iot/data (recent history)
  - /api/iot/anomalies (anomaly list)
  - /api/iot/status (device status)
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pyvitaltwin._api._envelope import unwrap_success
from pyvitaltwin._constants import (
    ANOMALIES_PATH,
    DEVICE_STATUS_PATH,
    HISTORY_PATH,
    LATEST_READING_PATH,
)
from pyvitaltwin._transport import Transport
from pyvitaltwin.exceptions import TwinProtocolError
from pyvitaltwin.models.anomaly import Anomaly
from pyvitaltwin.models.device import DeviceStatus
from pyvitaltwin.models.reading import TelemetryReading

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse_one(model: type[M], payload: Any, *, endpoint: str) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise TwinProtocolError(
            f"{endpoint} returned an invalid {model.__name__}: {exc.error_count()} error(s)",
            endpoint=endpoint,
        ) from exc


def _parse_list(model: type[M], payload: Any, *, endpoint: str) -> list[M]:
    """Parse every valid item of *payload*, skipping and logging the rest."""
    if not isinstance(payload, list):
        raise TwinProtocolError(
            f"{endpoint} returned {type(payload).__name__}, expected a list",
            endpoint=endpoint,
        )
    items: list[M] = []
    for index, item in enumerate(payload):
        try:
            items.append(model.model_validate(item))
        except ValidationError as exc:
            _logger.warning(
                "Skipping invalid %s at index %d from %s: %d error(s)",
                model.__name__,
                index,
                endpoint,
                exc.error_count(),
            )
    return items


async def fetch_latest_reading(transport: Transport) -> TelemetryReading:
    response = await transport.get_json(LATEST_READING_PATH)
    data = unwrap_success(response, endpoint=LATEST_READING_PATH, key="data")
    return _parse_one(TelemetryReading, data, endpoint=LATEST_READING_PATH)


async def fetch_history(transport: Transport) -> list[TelemetryReading]:
    """Fetch the server's stored readings, oldest first."""
    response = await transport.get_json(HISTORY_PATH)
    data = unwrap_success(response, endpoint=HISTORY_PATH, key="data")
    return _parse_list(TelemetryReading, data, endpoint=HISTORY_PATH)


async def fetch_anomalies(transport: Transport) -> list[Anomaly]:
    response = await transport.get_json(ANOMALIES_PATH)
    data = unwrap_success(response, endpoint=ANOMALIES_PATH, key="anomalies")
    return _parse_list(Anomaly, data, endpoint=ANOMALIES_PATH)


async def fetch_device_status(transport: Transport) -> DeviceStatus:
    response = await transport.get_json(DEVICE_STATUS_PATH)
    data = unwrap_success(response, endpoint=DEVICE_STATUS_PATH, key="device_status")
    return _parse_one(DeviceStatus, data, endpoint=DEVICE_STATUS_PATH)

"""High-level async client for the telemetry API."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pyvitaltwin._api import telemetry as _telemetry_api
from pyvitaltwin._transport import HttpTransport, Transport
from pyvitaltwin.config import TwinConfig
from pyvitaltwin.exceptions import TwinError
from pyvitaltwin.models.anomaly import Anomaly
from pyvitaltwin.models.device import DeviceStatus
from pyvitaltwin.models.reading import TelemetryReading

_logger = logging.getLogger(__name__)


class TwinClient:
    """Async client for the animal telemetry API.

    Every read method raises a :class:`~pyvitaltwin.exceptions.TwinFetchError`
    subclass on failure; nothing is cached here.

    Usage::

        async with TwinClient(config) as client:
            reading = await client.get_latest_reading()
    """

    def __init__(
        self,
        config: TwinConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or TwinConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    @property
    def config(self) -> TwinConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TwinClient:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def open(self) -> None:
        if self._external_transport:
            return
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        _logger.debug("Telemetry client opened for %s", self._config.base_url)

    async def close(self) -> None:
        if self._external_transport:
            return
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise TwinError("Client not initialized. Use 'async with TwinClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def get_latest_reading(self) -> TelemetryReading:
        """Fetch the most recent vital-sign reading."""
        return await _telemetry_api.fetch_latest_reading(self._require_transport())

    async def get_history(self) -> list[TelemetryReading]:
        """Fetch the readings the server currently stores, oldest first."""
        return await _telemetry_api.fetch_history(self._require_transport())

    async def get_anomalies(self) -> list[Anomaly]:
        """Fetch the server's anomaly list, in server order."""
        return await _telemetry_api.fetch_anomalies(self._require_transport())

    async def get_device_status(self) -> DeviceStatus:
        return await _telemetry_api.fetch_device_status(self._require_transport())

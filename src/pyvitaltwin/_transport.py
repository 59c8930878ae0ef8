"""HTTP transport for the telemetry API."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pyvitaltwin._constants import USER_AGENT
from pyvitaltwin._redact import summarize_for_log
from pyvitaltwin.config import TwinConfig
from pyvitaltwin.exceptions import TwinProtocolError, TwinTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> Any:
        ...


class HttpTransport:
    """Plain JSON-over-HTTP transport backed by an ``aiohttp`` session."""

    def __init__(self, config: TwinConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str) -> Any:
        """GET ``base_url + endpoint`` and return the decoded JSON body.

        Network errors, timeouts and non-2xx statuses raise
        :class:`TwinTransportError`; a body that is not JSON raises
        :class:`TwinProtocolError`.
        """
        url = f"{self._config.base_url}{endpoint}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                raw = await resp.read()
                if not 200 <= resp.status < 300:
                    raise TwinTransportError(
                        f"HTTP {resp.status} from {endpoint}: {raw[:200].decode(errors='replace')}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except TwinTransportError:
            raise
        except TimeoutError as exc:
            raise TwinTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise TwinTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TwinProtocolError(
                f"Invalid JSON from {endpoint}: {raw[:200].decode(errors='replace')}",
                endpoint=endpoint,
            ) from exc

        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("Response from %s: %s", endpoint, summarize_for_log(body))
        return body

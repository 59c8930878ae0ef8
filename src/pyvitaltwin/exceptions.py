"""Custom exception hierarchy for pyvitaltwin."""

from __future__ import annotations


class TwinError(Exception):
    """Base exception for all pyvitaltwin errors."""


class TwinConfigError(TwinError):
    """Invalid or missing configuration."""


class TwinFetchError(TwinError):
    """A single endpoint fetch failed.

    The poller treats every subclass the same way: the affected slice of
    state keeps its last-known-good value for the cycle.
    """

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class TwinTransportError(TwinFetchError):
    """HTTP-level failure (network error, timeout, non-2xx status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        super().__init__(message, endpoint=endpoint)


class TwinProtocolError(TwinFetchError):
    """Response body was not a usable envelope.

    Covers non-JSON bodies, ``success: false``, a missing payload key,
    and payloads that fail model validation.
    """

"""Unwrapping of the ``{"success": ..., <key>: ...}`` response envelope."""

from __future__ import annotations

from typing import Any

from pyvitaltwin.exceptions import TwinProtocolError


def unwrap_success(response: Any, *, endpoint: str, key: str) -> Any:
    """Return ``response[key]`` from a successful envelope.

    Raises :class:`TwinProtocolError` when the body is not an object,
    ``success`` is not true, or *key* is missing.
    """
    if not isinstance(response, dict):
        raise TwinProtocolError(
            f"{endpoint} returned {type(response).__name__}, expected an object",
            endpoint=endpoint,
        )
    if response.get("success") is not True:
        message = response.get("error") or response.get("message") or "success=false"
        raise TwinProtocolError(f"{endpoint} failed: {message}", endpoint=endpoint)
    if key not in response or response[key] is None:
        raise TwinProtocolError(f"{endpoint} response is missing '{key}'", endpoint=endpoint)
    return response[key]

"""Client and engine configuration for pyvitaltwin."""

from __future__ import annotations

import dataclasses
import math
import os
from typing import Any

from pyvitaltwin._constants import (
    BASE_URL,
    DEFAULT_ANOMALY_CAPACITY,
    DEFAULT_HISTORY_CAPACITY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
)
from pyvitaltwin.exceptions import TwinConfigError


@dataclasses.dataclass(frozen=True)
class TwinConfig:
    """Engine configuration.

    Parameters
    ----------
    base_url : str
        Base address of the telemetry API, without a trailing slash.
    poll_interval : float
        Seconds between the starts of two steady-state fetch cycles.
    history_capacity : int
        Number of readings kept in the sliding history window.
    anomaly_capacity : int
        Number of anomalies mirrored from the server's list.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    min_poll_gap : float
        Minimum pause in seconds after a cycle that overran
        ``poll_interval`` before the next one starts.
    """

    base_url: str = BASE_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    anomaly_capacity: int = DEFAULT_ANOMALY_CAPACITY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    min_poll_gap: float = 0.0

    def __post_init__(self) -> None:
        base_url = str(self.base_url).strip().rstrip("/")
        if not base_url.startswith(("http://", "https://")):
            raise TwinConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        object.__setattr__(self, "base_url", base_url)

        for name in ("history_capacity", "anomaly_capacity"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise TwinConfigError(f"{name} must be a positive integer, got {value!r}")

        for name in ("poll_interval", "request_timeout"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise TwinConfigError(f"{name} must be a number of seconds, got {getattr(self, name)!r}") from exc
            if not math.isfinite(value) or value <= 0:
                raise TwinConfigError(f"{name} must be a positive number of seconds, got {value!r}")
            object.__setattr__(self, name, value)

        try:
            gap = float(self.min_poll_gap)
        except (TypeError, ValueError) as exc:
            raise TwinConfigError(f"min_poll_gap must be a number of seconds, got {self.min_poll_gap!r}") from exc
        if not math.isfinite(gap) or gap < 0:
            raise TwinConfigError(f"min_poll_gap must be >= 0, got {self.min_poll_gap!r}")
        object.__setattr__(self, "min_poll_gap", gap)

    @classmethod
    def from_env(cls, **overrides: Any) -> TwinConfig:
        """Create configuration from environment variables.

        Reads the optional ``VITALTWIN_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TwinConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP: dict[str, tuple[str, type]] = {
            "VITALTWIN_BASE_URL": ("base_url", str),
            "VITALTWIN_POLL_INTERVAL": ("poll_interval", float),
            "VITALTWIN_HISTORY_CAPACITY": ("history_capacity", int),
            "VITALTWIN_ANOMALY_CAPACITY": ("anomaly_capacity", int),
            "VITALTWIN_REQUEST_TIMEOUT": ("request_timeout", float),
            "VITALTWIN_MIN_POLL_GAP": ("min_poll_gap", float),
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, (field_name, converter) in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = converter(val)
            except ValueError as exc:
                raise TwinConfigError(f"{env_key} has an invalid value: {val!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

"""Base model for telemetry API payloads.

Every payload model inherits from :class:`TwinBaseModel` which
provides:

* Frozen instances, so a model handed to a snapshot consumer can never
  be mutated behind the engine's back.
* ``populate_by_name`` so models can be built from either the wire keys
  (``temperatura_celsius``) or the Python field names (``temperature``).
* A ``model_validator(mode="before")`` that strips placeholder values
  (``""``, ``"--"``, NaN) so the field default, or a validation error
  for required fields, is used instead.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator

# Placeholder strings the telemetry API may send for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null"})

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def parse_timestamp(value: Any) -> datetime | None:
    """Convert an API timestamp to a timezone-aware UTC datetime.

    Accepts ISO-8601 strings (``Z`` suffix included), epoch seconds or
    epoch milliseconds. Naive datetimes are assumed to be UTC.
    Returns ``None`` when the value is ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"unsupported timestamp value: {value!r}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


TwinTimestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces ISO strings and epoch numbers to UTC datetimes."""


def require_finite(value: float) -> float:
    """Reject NaN and infinities in vital-sign fields."""
    if not math.isfinite(value):
        raise ValueError(f"value must be finite, got {value!r}")
    return value


class TwinBaseModel(BaseModel):
    """Base for telemetry API payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _clean_placeholders(cls, values: Any) -> Any:
        """Drop placeholder values before field validation."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

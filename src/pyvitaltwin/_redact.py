"""Helpers for compact debug logging.

History responses can carry hundreds of readings. This module trims
payloads before they are emitted in DEBUG logs and masks the few keys
that may carry credentials when the API sits behind a proxy.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset({"authorization", "cookie", "token", "api_key"})


def summarize_for_log(
    value: Any,
    *,
    max_string: int = 256,
    max_items: int = 5,
    _depth: int = 0,
) -> Any:
    """Return a trimmed copy of *value* suitable for debug logs.

    Sequences longer than *max_items* keep their last items (the newest
    readings) plus a marker with the number of dropped entries.
    """
    if _depth > 10:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        summary: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _SENSITIVE_VALUE_KEYS:
                summary[key] = "<redacted>"
            else:
                summary[key] = summarize_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
        return summary

    if isinstance(value, Sequence) and not isinstance(value, bytearray):
        items = list(value)
        dropped = max(0, len(items) - max_items)
        kept = [
            summarize_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
            for v in items[dropped:]
        ]
        if dropped:
            return [f"<{dropped} more>", *kept]
        return kept

    return repr(value)

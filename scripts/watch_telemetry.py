#!/usr/bin/env python3
"""Watch the live telemetry view that pyvitaltwin maintains.

Starts a :class:`TelemetryPoller` against the telemetry API and prints a
line per published snapshot: latest vitals with their health bands,
device status, anomaly count and any endpoints that missed their last
update.

Usage
-----
::

    export VITALTWIN_BASE_URL="http://localhost:5001"
    python scripts/watch_telemetry.py

Options::

    --base-url URL       API base address (default: env / http://localhost:5001)
    --interval SECONDS   Poll interval (default: env / 5)
    --cycles N           Exit after N published snapshots (default: run forever)
    --json               Print one JSON document per snapshot
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyvitaltwin import (  # noqa: E402
    TelemetryPoller,
    TelemetrySnapshot,
    TwinConfig,
    TwinConfigError,
    classify_reading,
)

# ── formatting ───────────────────────────────────────────────


def _snapshot_to_dict(snapshot: TelemetrySnapshot) -> dict[str, Any]:
    payload: dict[str, Any] = snapshot.model_dump(mode="json", exclude={"history"})
    payload["history_size"] = len(snapshot.history)
    if snapshot.latest is not None:
        assessment = classify_reading(snapshot.latest)
        payload["assessment"] = assessment.model_dump(mode="json")
    return payload


def _format_line(snapshot: TelemetrySnapshot) -> str:
    parts = [f"#{snapshot.cycle}"]

    latest = snapshot.latest
    if latest is None:
        parts.append("no reading yet")
    else:
        assessment = classify_reading(latest)
        parts.append(f"temp {latest.temperature:.1f}°C ({assessment.temperature.label})")
        parts.append(f"hr {latest.heart_rate:.0f} bpm ({assessment.heart_rate.label})")

    status = snapshot.device_status
    if status is None:
        parts.append("device unknown")
    else:
        online = "online" if status.online else "offline"
        parts.append(f"{status.device_id or 'device'} {online} {status.battery_level}% {status.signal_strength}".rstrip())

    parts.append(f"history {len(snapshot.history)}")
    parts.append(f"anomalies {len(snapshot.anomalies)}")
    if snapshot.stale:
        parts.append("stale: " + ",".join(sorted(snapshot.stale)))
    return " | ".join(parts)


# ── main ─────────────────────────────────────────────────────


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.interval is not None:
        overrides["poll_interval"] = args.interval
    try:
        config = TwinConfig.from_env(**overrides)
    except TwinConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    done = asyncio.Event()
    seen = 0

    def _print(snapshot: TelemetrySnapshot) -> None:
        nonlocal seen
        if args.json_mode:
            print(json.dumps(_snapshot_to_dict(snapshot), ensure_ascii=False), flush=True)
        else:
            print(_format_line(snapshot), flush=True)
        seen += 1
        if args.cycles is not None and seen >= args.cycles:
            done.set()

    poller = TelemetryPoller(config=config)
    poller.subscribe(_print)
    async with poller:
        await done.wait()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Print live snapshots from the telemetry API.")
    parser.add_argument("--base-url", help="Telemetry API base address")
    parser.add_argument("--interval", type=float, help="Poll interval in seconds")
    parser.add_argument("--cycles", type=int, help="Exit after N published snapshots")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output one JSON document per snapshot")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    with contextlib.suppress(KeyboardInterrupt):
        return asyncio.run(_run(args))
    return 130


if __name__ == "__main__":
    sys.exit(main())

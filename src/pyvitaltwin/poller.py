"""Telemetry synchronization engine.

:class:`TelemetryPoller` pulls the remote API on a fixed cadence,
reconciles each result into the bounded in-memory state, and publishes
an immutable :class:`~pyvitaltwin.models.snapshot.TelemetrySnapshot`
after every completed cycle.

States: ``BOOTSTRAPPING`` until the first snapshot is published, then
``IDLE`` and ``FETCHING`` alternate. ``STOPPED`` is reachable from any
state and is final.

Cycles never overlap: the scheduler only starts the next cycle once the
previous one has resolved, and a manual :meth:`TelemetryPoller.refresh`
issued while a cycle is in flight joins that cycle.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import datetime
from enum import StrEnum
from typing import Any

from pyvitaltwin.client import TwinClient
from pyvitaltwin.config import TwinConfig
from pyvitaltwin.exceptions import TwinError, TwinFetchError
from pyvitaltwin.models.snapshot import TelemetryEndpoint, TelemetrySnapshot
from pyvitaltwin.state.store import TelemetryStore

_logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[TelemetrySnapshot], None]
SnapshotPredicate = Callable[[TelemetrySnapshot], bool]


class PollerState(StrEnum):
    BOOTSTRAPPING = "bootstrapping"
    IDLE = "idle"
    FETCHING = "fetching"
    STOPPED = "stopped"


class TelemetryPoller:
    """Owns the telemetry state and keeps it in sync with the remote API.

    Parameters
    ----------
    client : TwinClient or None
        Client used for all fetches. When omitted, a client is built from
        *config* and opened/closed by the poller.
    config : TwinConfig or None
        Engine configuration. Defaults to ``client.config``.
    clock : callable or None
        Wall-clock source for snapshot and failure timestamps.

    Usage::

        async with TelemetryPoller(config=TwinConfig(poll_interval=2.0)) as poller:
            poller.subscribe(render)
            await asyncio.Event().wait()
    """

    def __init__(
        self,
        client: TwinClient | None = None,
        config: TwinConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else TwinClient(config)
        self._config = config if config is not None else self._client.config

        store_kwargs: dict[str, Any] = {
            "history_capacity": self._config.history_capacity,
            "anomaly_capacity": self._config.anomaly_capacity,
        }
        if clock is not None:
            store_kwargs["clock"] = clock
        self._store = TelemetryStore(**store_kwargs)

        self._state = PollerState.BOOTSTRAPPING
        self._started = False
        self._loading = True
        self._cycles = 0
        self._snapshot = TelemetrySnapshot()
        self._subscribers: list[SnapshotCallback] = []
        self._waiters: list[tuple[SnapshotPredicate | None, asyncio.Future[TelemetrySnapshot]]] = []
        self._inflight: asyncio.Task[None] | None = None
        self._scheduler: asyncio.Task[None] | None = None
        self._last_cycle_started: float | None = None

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    @property
    def config(self) -> TwinConfig:
        return self._config

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def snapshot(self) -> TelemetrySnapshot:
        """The most recently published snapshot (empty and loading before bootstrap)."""
        return self._snapshot

    @property
    def is_running(self) -> bool:
        return self._started and self._state is not PollerState.STOPPED

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """Call *callback* with every snapshot published from now on.

        Returns a function that removes the subscription. Exceptions raised
        by *callback* are logged and otherwise ignored.
        """
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._subscribers.remove(callback)

        return _unsubscribe

    async def wait_for_snapshot(
        self,
        predicate: SnapshotPredicate | None = None,
        *,
        timeout: float | None = None,
    ) -> TelemetrySnapshot:
        """Wait for the next published snapshot matching *predicate*.

        Raises :class:`TimeoutError` after *timeout* seconds and
        :class:`TwinError` if the poller is stopped while waiting. An
        exception raised by *predicate* is re-raised here and ends the wait.
        """
        if self._state is PollerState.STOPPED:
            raise TwinError("Poller is stopped")
        fut: asyncio.Future[TelemetrySnapshot] = asyncio.get_running_loop().create_future()
        waiter = (predicate, fut)
        self._waiters.append(waiter)
        try:
            return await asyncio.wait_for(fut, timeout)
        finally:
            with contextlib.suppress(ValueError):
                self._waiters.remove(waiter)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TelemetryPoller:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def start(self) -> None:
        """Bootstrap the state and launch the background scheduler.

        Returns once the first snapshot with ``loading=False`` has been
        published. A failed history fetch does not abort the bootstrap.
        """
        if self._state is PollerState.STOPPED:
            raise TwinError("Poller has been stopped and cannot be restarted")
        if self._started:
            return
        self._started = True
        if self._owns_client:
            await self._client.open()

        try:
            await self._bootstrap_history()
            if self._state is PollerState.STOPPED:
                return
            await self.refresh()
        except BaseException:
            await self.aclose()
            raise
        if self._state is PollerState.STOPPED:
            return

        self._scheduler = asyncio.create_task(self._run_scheduler(), name="pyvitaltwin-scheduler")

    def stop(self) -> None:
        """Stop the engine.

        Cancels the scheduler so no further ticks fire. A cycle already in
        flight is allowed to resolve, but its results are discarded and no
        snapshot is published for it. Safe to call more than once.
        """
        if self._state is PollerState.STOPPED:
            return
        _logger.debug("Stopping telemetry poller after %d cycles", self._cycles)
        self._state = PollerState.STOPPED

        if self._scheduler is not None and not self._scheduler.done():
            self._scheduler.cancel()

        for _, fut in self._waiters:
            if not fut.done():
                fut.set_exception(TwinError("Poller stopped"))
        self._waiters.clear()

    async def aclose(self) -> None:
        """Stop the engine, abort any in-flight cycle and release the client."""
        scheduler = self._scheduler
        inflight = self._inflight
        self.stop()
        try:
            for task in (scheduler, inflight):
                if task is None:
                    continue
                if not task.done():
                    task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        finally:
            self._scheduler = None
            self._inflight = None
            if self._owns_client:
                await self._client.close()

    # ------------------------------------------------------------------
    # Fetch cycles
    # ------------------------------------------------------------------

    async def refresh(self) -> TelemetrySnapshot:
        """Run one fetch cycle now and return the resulting snapshot.

        If a cycle is already in flight, waits for that one instead of
        starting a second. After :meth:`stop`, returns the last snapshot
        without fetching.
        """
        if not self._started:
            raise TwinError("Poller not started. Use 'await poller.start()' or 'async with poller:'")
        if self._state is PollerState.STOPPED:
            return self._snapshot
        if self._inflight is None or self._inflight.done():
            self._last_cycle_started = asyncio.get_running_loop().time()
            self._inflight = asyncio.create_task(self._run_cycle(), name="pyvitaltwin-cycle")
        # Shielded: cancelling the caller (e.g. the scheduler on stop) must not
        # abort the cycle itself; its results are discarded in _run_cycle instead.
        await asyncio.shield(self._inflight)
        return self._snapshot

    async def _bootstrap_history(self) -> None:
        try:
            readings = await self._client.get_history()
        except TwinFetchError as exc:
            self._store.record_failure(TelemetryEndpoint.HISTORY, str(exc), stale=False)
            _logger.warning("History bootstrap failed, starting with an empty window: %s", exc)
            return
        except Exception as exc:
            self._store.record_failure(TelemetryEndpoint.HISTORY, f"{type(exc).__name__}: {exc}", stale=False)
            _logger.error("Unexpected error fetching history, starting with an empty window", exc_info=True)
            return
        if self._state is PollerState.STOPPED:
            return
        self._store.seed_history(readings)
        _logger.debug(
            "History seeded with %d of %d readings (capacity %d)",
            len(self._store.history),
            len(readings),
            self._store.history.capacity,
        )

    async def _run_cycle(self) -> None:
        if self._state is PollerState.IDLE:
            self._state = PollerState.FETCHING

        latest, anomalies, device_status = await asyncio.gather(
            self._client.get_latest_reading(),
            self._client.get_anomalies(),
            self._client.get_device_status(),
            return_exceptions=True,
        )

        if self._state is PollerState.STOPPED:
            _logger.debug("Discarding fetch cycle results that resolved after stop")
            return
        for outcome in (latest, anomalies, device_status):
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome

        self._apply(TelemetryEndpoint.LATEST, latest, self._store.apply_latest)
        self._apply(TelemetryEndpoint.ANOMALIES, anomalies, self._store.apply_anomalies)
        self._apply(TelemetryEndpoint.DEVICE_STATUS, device_status, self._store.apply_device_status)

        self._cycles += 1
        self._loading = False
        self._state = PollerState.IDLE
        self._publish()

    def _apply(self, endpoint: TelemetryEndpoint, outcome: Any, apply: Callable[[Any], None]) -> None:
        """Apply one fetch outcome; failures leave the slice untouched."""
        if isinstance(outcome, TwinFetchError):
            self._store.record_failure(endpoint, str(outcome))
            _logger.warning("Fetching %s failed: %s", endpoint.value, outcome)
            return
        if isinstance(outcome, Exception):
            self._store.record_failure(endpoint, f"{type(outcome).__name__}: {outcome}")
            _logger.error("Unexpected error fetching %s", endpoint.value, exc_info=outcome)
            return
        apply(outcome)

    def _publish(self) -> None:
        snapshot = self._store.snapshot(loading=self._loading, cycle=self._cycles)
        self._snapshot = snapshot
        _logger.debug(
            "Published snapshot #%d (history=%d, anomalies=%d, stale=%s)",
            snapshot.cycle,
            len(snapshot.history),
            len(snapshot.anomalies),
            sorted(snapshot.stale) or "-",
        )

        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                _logger.warning("Snapshot subscriber %r failed", callback, exc_info=True)

        remaining: list[tuple[SnapshotPredicate | None, asyncio.Future[TelemetrySnapshot]]] = []
        for predicate, fut in self._waiters:
            if fut.done():
                continue
            try:
                matched = predicate is None or predicate(snapshot)
            except Exception as exc:
                fut.set_exception(exc)
                continue
            if not matched:
                remaining.append((predicate, fut))
                continue
            fut.set_result(snapshot)
        self._waiters = remaining

    # ------------------------------------------------------------------
    # Scheduler
    # ------------------------------------------------------------------

    async def _run_scheduler(self) -> None:
        """Start a cycle every ``poll_interval`` seconds, never overlapping."""
        loop = asyncio.get_running_loop()
        interval = self._config.poll_interval
        started = self._last_cycle_started if self._last_cycle_started is not None else loop.time()
        next_start = started + interval

        while self._state is not PollerState.STOPPED:
            delay = next_start - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)

            started = loop.time()
            try:
                await self.refresh()
            except Exception:
                _logger.error("Telemetry cycle failed", exc_info=True)
            finished = loop.time()

            elapsed = finished - started
            if elapsed > interval:
                _logger.warning(
                    "Fetch cycle took %.2fs, longer than the %.2fs poll interval",
                    elapsed,
                    interval,
                )
            next_start = max(started + interval, finished + self._config.min_poll_gap)

"""Holder for the most recently observed device status."""

from __future__ import annotations

from pyvitaltwin.models.device import DeviceStatus


class DeviceStatusTracker:
    """Keeps exactly one device status, replaced wholesale on update.

    No history and no field-level merging: a later status fully supersedes
    the earlier one. Failed fetches simply never call :meth:`update`, so
    the previous value stays visible.
    """

    def __init__(self) -> None:
        self._status: DeviceStatus | None = None

    def update(self, status: DeviceStatus) -> None:
        self._status = status

    def current(self) -> DeviceStatus | None:
        """Return the held status, or ``None`` before the first successful fetch."""
        return self._status

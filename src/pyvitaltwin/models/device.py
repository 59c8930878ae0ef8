"""Device connectivity status model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyvitaltwin.models._base import TwinBaseModel


class DeviceStatus(TwinBaseModel):
    """Current connectivity of the monitoring device.

    Parameters
    ----------
    device_id : str
        Identifier of the collar device.
    online : bool
        Whether the device is currently reachable.
    battery_level : int
        Battery charge in percent (0-100).
    signal_strength : str
        Signal quality label as reported by the server.
    """

    device_id: str = Field(default="", validation_alias=AliasChoices("device_id", "deviceId"))
    online: bool
    battery_level: int = Field(ge=0, le=100, validation_alias=AliasChoices("battery_level", "batteryLevel"))
    signal_strength: str = Field(
        default="",
        validation_alias=AliasChoices("signal_strength", "signalStrength"),
    )

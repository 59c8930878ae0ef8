"""Anomaly record model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyvitaltwin.models._base import TwinBaseModel, TwinTimestamp


class Anomaly(TwinBaseModel):
    """An anomaly the server detected in the vital-sign stream.

    ``kind`` is the vital sign involved (e.g. ``"temperatura"``) and
    ``subtype`` the detected condition (e.g. ``"fiebre"``); both are
    passed through verbatim from the server.
    """

    kind: str = Field(validation_alias=AliasChoices("type", "kind"))
    subtype: str = ""
    value: float
    normal_range: str = Field(default="", validation_alias=AliasChoices("normal_range", "normalRange"))
    timestamp: TwinTimestamp

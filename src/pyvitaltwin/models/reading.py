"""Vital-sign reading model."""

from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator

from pyvitaltwin.models._base import TwinBaseModel, TwinTimestamp, require_finite


class TelemetryReading(TwinBaseModel):
    """One vital-sign sample reported by the collar device.

    Parameters
    ----------
    temperature : float
        Body temperature in °C.
    heart_rate : float
        Heart rate in beats per minute.
    timestamp : datetime
        Time the sample was taken (UTC).
    """

    temperature: float = Field(validation_alias=AliasChoices("temperatura_celsius", "temperature"))
    heart_rate: float = Field(
        validation_alias=AliasChoices("frecuencia_cardiaca_lpm", "heart_rate", "heartRate"),
    )
    timestamp: TwinTimestamp

    @field_validator("temperature", "heart_rate")
    @classmethod
    def _finite_vitals(cls, value: float) -> float:
        return require_finite(value)

"""Health-band classification for vital signs.

Pure functions: the poller never calls them, snapshot consumers do.
Bands are closed on the normal side, so the thresholds themselves are
``Normal``.
"""

from __future__ import annotations

import math
from enum import StrEnum
from numbers import Real

from pydantic import BaseModel, ConfigDict

from pyvitaltwin.models.reading import TelemetryReading

TEMPERATURE_LOW_C = 37.5
TEMPERATURE_HIGH_C = 39.2
HEART_RATE_LOW_BPM = 70.0
HEART_RATE_HIGH_BPM = 120.0


class Severity(StrEnum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class VitalStatus(BaseModel):
    """Label and severity of a single vital sign."""

    model_config = ConfigDict(frozen=True)

    label: str
    severity: Severity

    @property
    def is_normal(self) -> bool:
        return self.severity is Severity.NORMAL


class ReadingAssessment(BaseModel):
    """Both vital-sign statuses for one reading."""

    model_config = ConfigDict(frozen=True)

    temperature: VitalStatus
    heart_rate: VitalStatus

    @property
    def is_normal(self) -> bool:
        return self.temperature.is_normal and self.heart_rate.is_normal


_NORMAL = VitalStatus(label="Normal", severity=Severity.NORMAL)
_HYPOTHERMIA = VitalStatus(label="Hypothermia", severity=Severity.LOW)
_FEVER = VitalStatus(label="Fever", severity=Severity.HIGH)
_BRADYCARDIA = VitalStatus(label="Bradycardia", severity=Severity.LOW)
_TACHYCARDIA = VitalStatus(label="Tachycardia", severity=Severity.HIGH)


def _finite(value: float, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{name} must be a real number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return number


def classify_temperature(value: float) -> VitalStatus:
    """Classify a body temperature in °C.

    Raises :class:`ValueError` for NaN, infinities and non-numeric input.
    """
    temp = _finite(value, "temperature")
    if temp < TEMPERATURE_LOW_C:
        return _HYPOTHERMIA
    if temp > TEMPERATURE_HIGH_C:
        return _FEVER
    return _NORMAL


def classify_heart_rate(value: float) -> VitalStatus:
    """Classify a heart rate in beats per minute.

    Raises :class:`ValueError` for NaN, infinities and non-numeric input.
    """
    bpm = _finite(value, "heart_rate")
    if bpm < HEART_RATE_LOW_BPM:
        return _BRADYCARDIA
    if bpm > HEART_RATE_HIGH_BPM:
        return _TACHYCARDIA
    return _NORMAL


def classify_reading(reading: TelemetryReading) -> ReadingAssessment:
    return ReadingAssessment(
        temperature=classify_temperature(reading.temperature),
        heart_rate=classify_heart_rate(reading.heart_rate),
    )

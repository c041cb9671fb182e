"""
src/data/models.py
──────────────────
Pydantic v2 data models for readings, thresholds, alarm events and overviews.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

from config.alarms import OPEN_STATUSES, AlarmLevel, AlarmType, AlertStatus, DeviceStatus
from config.devices import DISPLACEMENT_THRESHOLD, HUMIDITY_THRESHOLD, THRESHOLD_KEYS, VIBRATION_THRESHOLD
from src.data.errors import ConfigError


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken as UTC; aware ones are converted to it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Reading(BaseModel):
    """One sensor sample for one device at one instant. Immutable."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )

    device_id: str = Field(min_length=1)
    leak_detected: StrictBool
    humidity_index: float = Field(ge=0.0, le=100.0, strict=True)
    vibration_level: float = Field(ge=0.0, strict=True)
    displacement: float = Field(strict=True)
    cable_present: StrictBool
    power_status: StrictBool
    signal_strength: float = Field(strict=True)
    current_strength: float = Field(strict=True)
    recorded_at: datetime = Field(default_factory=_utcnow)

    @field_validator("recorded_at")
    @classmethod
    def recorded_at_utc(cls, value: datetime) -> datetime:
        # Stored as ISO text and ordered as text, so every timestamp shares one offset
        return _as_utc(value)


class ThresholdConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    vibration_threshold: float
    displacement_threshold: float
    humidity_threshold: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> ThresholdConfig:
        """
        Build from a key → value mapping as stored in `system_config`.

        Every threshold key must be present and parse as a finite number;
        anything else is a ConfigError rather than a silent zero.
        """
        values: dict[str, float] = {}
        for key in THRESHOLD_KEYS:
            if key not in raw or raw[key] is None:
                raise ConfigError(f"Missing threshold '{key}'")
            value = raw[key]
            if isinstance(value, bool):
                raise ConfigError(f"Threshold '{key}' is not numeric: {value!r}")
            try:
                number = float(value)  # type: ignore[arg-type]
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"Threshold '{key}' is not numeric: {value!r}") from exc
            if not math.isfinite(number):
                raise ConfigError(f"Threshold '{key}' is not finite: {value!r}")
            values[key] = number
        return cls(
            vibration_threshold=values[VIBRATION_THRESHOLD],
            displacement_threshold=values[DISPLACEMENT_THRESHOLD],
            humidity_threshold=values[HUMIDITY_THRESHOLD],
        )


class AlarmEvent(BaseModel):
    id: int | None = None
    device_id: str
    alarm_type: AlarmType
    alarm_level: AlarmLevel
    observed_value: float | str
    threshold: float | None = None
    description: str
    status: AlertStatus = AlertStatus.UNHANDLED
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES


class EvaluationResult(BaseModel):
    status: DeviceStatus
    alarms: list[AlarmEvent] = Field(default_factory=list)       # new, to persist
    candidates: list[AlarmEvent] = Field(default_factory=list)   # every alarm that fired
    suppressed: list[AlarmEvent] = Field(default_factory=list)   # fired but already open


class Device(BaseModel):
    device_code: str
    name: str = ""
    location: str = ""
    status: DeviceStatus = DeviceStatus.NORMAL
    updated_at: datetime | None = None


class SystemOverview(BaseModel):
    system_status: DeviceStatus
    total_devices: int = Field(ge=0)
    abnormal_devices: int = Field(ge=0)
    open_alerts: int = Field(default=0, ge=0)
    leak_alerts: int = 0
    vibration_alerts: int = 0
    displacement_alerts: int = 0
    cable_alerts: int = 0
    power_alerts: int = 0
    last_check_time: datetime | None = None


class IngestResult(BaseModel):
    reading_id: int
    device_code: str
    status: DeviceStatus
    alarms: list[AlarmEvent] = Field(default_factory=list)

"""
tests/test_models.py
─────────────────────
Tests for Pydantic v2 data models.
"""
from datetime import timedelta

import pytest
from pydantic import ValidationError

from config.alarms import AlarmLevel, AlarmType, AlertStatus
from src.data.errors import ConfigError
from src.data.models import AlarmEvent, Reading, ThresholdConfig


class TestReading:
    def test_camel_case_payload(self, nominal_payload, now):
        r = Reading.model_validate(nominal_payload)
        assert r.device_id == "CH-001"
        assert r.vibration_level == 12.0
        assert r.cable_present is True
        assert r.recorded_at == now

    def test_snake_case_names_accepted(self, nominal_payload):
        r = Reading(
            device_id="CH-002",
            leak_detected=False,
            humidity_index=50.0,
            vibration_level=3,
            displacement=-1.5,
            cable_present=True,
            power_status=True,
            signal_strength=90.0,
            current_strength=80.0,
        )
        assert r.displacement == -1.5
        assert r.recorded_at is not None

    def test_reading_is_immutable(self, nominal_payload):
        r = Reading.model_validate(nominal_payload)
        with pytest.raises(ValidationError):
            r.vibration_level = 99.0

    def test_recorded_at_converted_to_utc(self, nominal_payload, now):
        r = Reading.model_validate({**nominal_payload, "recordedAt": "2024-06-01T20:00:00+08:00"})
        assert r.recorded_at == now
        assert r.recorded_at.utcoffset() == timedelta(0)
        assert r.recorded_at.isoformat() == "2024-06-01T12:00:00+00:00"

    def test_naive_recorded_at_taken_as_utc(self, nominal_payload, now):
        r = Reading.model_validate({**nominal_payload, "recordedAt": "2024-06-01T12:00:00"})
        assert r.recorded_at == now
        assert r.recorded_at.tzinfo is not None

    @pytest.mark.parametrize("field, value", [
        ("vibrationLevel", -1.0),
        ("vibrationLevel", "12"),
        ("humidityIndex", 101.0),
        ("leakDetected", "yes"),
        ("cablePresent", 1),
        ("vibrationLevel", float("nan")),
        ("deviceId", ""),
    ])
    def test_invalid_values(self, nominal_payload, field, value):
        with pytest.raises(ValidationError):
            Reading.model_validate({**nominal_payload, field: value})

    def test_missing_field(self, nominal_payload):
        del nominal_payload["powerStatus"]
        with pytest.raises(ValidationError):
            Reading.model_validate(nominal_payload)


class TestThresholdConfig:
    def test_from_string_mapping(self):
        cfg = ThresholdConfig.from_mapping(
            {"vibration_threshold": "30", "displacement_threshold": "10.5", "humidity_threshold": 80, "extra": "x"}
        )
        assert cfg.vibration_threshold == 30.0
        assert cfg.displacement_threshold == 10.5
        assert cfg.humidity_threshold == 80.0

    def test_missing_key_is_error_not_zero(self):
        with pytest.raises(ConfigError, match="humidity_threshold"):
            ThresholdConfig.from_mapping({"vibration_threshold": "30", "displacement_threshold": "10"})

    @pytest.mark.parametrize("value", ["", "abc", "inf", True, [1]])
    def test_unparsable_value(self, value):
        with pytest.raises(ConfigError):
            ThresholdConfig.from_mapping(
                {"vibration_threshold": value, "displacement_threshold": "10", "humidity_threshold": "80"}
            )


class TestAlarmEvent:
    def test_defaults(self):
        alarm = AlarmEvent(
            device_id="CH-001",
            alarm_type=AlarmType.LEAK,
            alarm_level=AlarmLevel.WARNING,
            observed_value="leak detected",
            description="leak",
        )
        assert alarm.status == AlertStatus.UNHANDLED
        assert alarm.id is None
        assert alarm.is_open

    @pytest.mark.parametrize("status, is_open", [
        (AlertStatus.UNHANDLED, True),
        (AlertStatus.ACKNOWLEDGED, True),
        (AlertStatus.RESOLVED, False),
    ])
    def test_is_open(self, status, is_open):
        alarm = AlarmEvent(
            device_id="CH-001", alarm_type="vibration", alarm_level="critical",
            observed_value=70.0, threshold=40.0, description="", status=status,
        )
        assert alarm.is_open is is_open

    def test_model_dump(self):
        alarm = AlarmEvent(device_id="CH-001", alarm_type="power_loss", alarm_level="critical",
                           observed_value="no power", description="off")
        data = alarm.model_dump()
        assert data["alarm_type"] == AlarmType.POWER_LOSS
        assert "created_at" in data

    def test_created_at_converted_to_utc(self, now):
        alarm = AlarmEvent(device_id="CH-001", alarm_type="leak", alarm_level="warning",
                           observed_value="leak detected", description="leak",
                           created_at="2024-06-01T14:00:00+02:00")
        assert alarm.created_at == now
        assert alarm.created_at.utcoffset() == timedelta(0)

"""
src/analytics/evaluator.py
──────────────────────────
Threshold-based alarm derivation and device-status reconciliation.

evaluate(reading, config, open_alerts) is pure: it reads nothing from the
store and writes nothing. Checks run in a fixed order and are independent,
so a single reading may raise several alarms:

  1. Leak          leak_detected              → warning
  2. Vibration     vibration_level > thr      → warning, critical above 1.5 × thr
  3. Displacement  displacement > thr         → warning, critical above 1.5 × thr
  4. CableMissing  not cable_present          → critical
  5. PowerLoss     not power_status           → critical

A fired alarm is suppressed when an open alarm of the same (device, type)
already exists. Device status is derived from every fired alarm, suppressed
or not. Open alarms whose condition has cleared are left untouched.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime

from pydantic import ValidationError as PydanticValidationError

from config.alarms import ESCALATION_FACTOR, AlarmLevel, AlarmType, DeviceStatus
from src.data.errors import ValidationError
from src.data.models import AlarmEvent, EvaluationResult, Reading, ThresholdConfig


def parse_reading(payload: Reading | Mapping[str, object]) -> Reading:
    """Validate a raw payload into a Reading, raising ValidationError."""
    if isinstance(payload, Reading):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError(f"Reading must be an object, got {type(payload).__name__}")
    try:
        return Reading.model_validate(dict(payload))
    except PydanticValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise ValidationError(f"Invalid reading ({fields})") from exc


def parse_config(config: ThresholdConfig | Mapping[str, object]) -> ThresholdConfig:
    if isinstance(config, ThresholdConfig):
        return config
    return ThresholdConfig.from_mapping(config)


def escalate(value: float, threshold: float) -> AlarmLevel:
    """Warning up to 1.5 × threshold (inclusive), critical beyond."""
    return AlarmLevel.WARNING if value <= threshold * ESCALATION_FACTOR else AlarmLevel.CRITICAL


def _fmt(value: float) -> str:
    return f"{value:g}"


def _candidates(reading: Reading, config: ThresholdConfig, now: datetime) -> list[AlarmEvent]:
    device = reading.device_id
    fired: list[AlarmEvent] = []

    def alarm(alarm_type, level, observed, threshold, description) -> None:
        fired.append(AlarmEvent(
            device_id=device,
            alarm_type=alarm_type,
            alarm_level=level,
            observed_value=observed,
            threshold=threshold,
            description=description,
            created_at=now,
        ))

    if reading.leak_detected is True:
        alarm(
            AlarmType.LEAK, AlarmLevel.WARNING, "leak detected", config.humidity_threshold,
            f"Device {device} detected a leak, humidity index {_fmt(reading.humidity_index)}%",
        )

    vib, vib_thr = reading.vibration_level, config.vibration_threshold
    if vib > vib_thr:
        alarm(
            AlarmType.VIBRATION, escalate(vib, vib_thr), vib, vib_thr,
            f"Device {device} vibration {_fmt(vib)}Hz exceeds threshold {_fmt(vib_thr)}Hz",
        )

    disp, disp_thr = reading.displacement, config.displacement_threshold
    if disp > disp_thr:
        alarm(
            AlarmType.DISPLACEMENT, escalate(disp, disp_thr), disp, disp_thr,
            f"Device {device} displacement {_fmt(disp)}mm exceeds threshold {_fmt(disp_thr)}mm",
        )

    if reading.cable_present is False:
        alarm(
            AlarmType.CABLE_MISSING, AlarmLevel.CRITICAL, "cable not detected", None,
            f"Device {device} did not detect a cable, signal strength {_fmt(reading.signal_strength)}%",
        )

    if reading.power_status is False:
        alarm(
            AlarmType.POWER_LOSS, AlarmLevel.CRITICAL, "no power", None,
            f"Device {device} has no power, current strength {_fmt(reading.current_strength)}%",
        )

    return fired


def reconcile_status(fired: Iterable[AlarmEvent]) -> DeviceStatus:
    levels = {a.alarm_level for a in fired}
    if AlarmLevel.CRITICAL in levels:
        return DeviceStatus.CRITICAL
    if AlarmLevel.WARNING in levels:
        return DeviceStatus.WARNING
    return DeviceStatus.NORMAL


def evaluate(
    reading: Reading | Mapping[str, object],
    config: ThresholdConfig | Mapping[str, object],
    open_alerts: Iterable[AlarmEvent] = (),
    now: datetime | None = None,
) -> EvaluationResult:
    """
    Evaluate one reading against the thresholds.

    Args:
        reading: Reading model or raw payload (ValidationError if malformed)
        config: ThresholdConfig or raw key → value mapping (ConfigError if incomplete)
        open_alerts: Currently open alarms for the reading's device
        now: Creation timestamp for new alarms; defaults to reading.recorded_at

    Returns:
        EvaluationResult with the reconciled status and the alarms to persist
    """
    reading = parse_reading(reading)
    config = parse_config(config)

    already_open = {
        a.alarm_type
        for a in open_alerts
        if a.is_open and a.device_id == reading.device_id
    }

    fired = _candidates(reading, config, now or reading.recorded_at)
    new = [a for a in fired if a.alarm_type not in already_open]
    suppressed = [a for a in fired if a.alarm_type in already_open]

    return EvaluationResult(
        status=reconcile_status(fired),
        alarms=new,
        candidates=fired,
        suppressed=suppressed,
    )


# ── Operator test alarms ──────────────────────────────────────────────────────

def build_test_alarm(
    device_id: str,
    alarm_type: AlarmType | str,
    config: ThresholdConfig | Mapping[str, object],
    now: datetime | None = None,
) -> AlarmEvent:
    """
    Synthetic warning-level alarm used to exercise the alarm pipeline end to end.
    Numeric types report 1.2 × their threshold.
    """
    try:
        alarm_type = AlarmType(alarm_type)
    except ValueError as exc:
        raise ValidationError(f"Unknown alarm type: {alarm_type!r}") from exc
    config = parse_config(config)

    observed: float | str
    threshold: float | None
    if alarm_type is AlarmType.LEAK:
        observed, threshold = "leak detected", config.humidity_threshold
    elif alarm_type is AlarmType.VIBRATION:
        threshold = config.vibration_threshold
        observed = round(threshold * 1.2, 3)
    elif alarm_type is AlarmType.DISPLACEMENT:
        threshold = config.displacement_threshold
        observed = round(threshold * 1.2, 3)
    elif alarm_type is AlarmType.CABLE_MISSING:
        observed, threshold = "cable not detected", None
    else:
        observed, threshold = "no power", None

    extra = {"created_at": now} if now is not None else {}
    return AlarmEvent(
        device_id=device_id,
        alarm_type=alarm_type,
        alarm_level=AlarmLevel.WARNING,
        observed_value=observed,
        threshold=threshold,
        description=f"Device {device_id} test alarm: {alarm_type.value.replace('_', ' ')}",
        **extra,
    )

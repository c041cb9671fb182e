"""
src/services/monitoring.py
──────────────────────────
Reading ingestion and operator actions on top of the store.

ingest() runs in two phases:
  1. validate the payload, resolve the device, load thresholds
     (any failure here leaves the database untouched)
  2. under the device's lock, in one transaction:
     append reading → load open alarms → evaluate → create alarms → set status

Per-device locks keep two readings for the same device from both judging an
alarm "new"; the store's unique index catches anything that slips past, and
that conflict counts as success.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Mapping

import pandas as pd

from config.alarms import STATUS_ORDER, AlarmType, AlertStatus, DeviceStatus
from src.analytics.evaluator import build_test_alarm, evaluate, parse_reading
from src.analytics.overview import summarize
from src.data.errors import ConfigError, ConflictError, DeviceNotFoundError, ValidationError
from src.data.models import AlarmEvent, IngestResult, Reading, SystemOverview
from src.data.store import AlertStore, ConfigStore, Database, DeviceRegistry, ReadingSink

logger = logging.getLogger(__name__)


class MonitoringService:
    def __init__(self, db: Database):
        self.db = db
        self.config = ConfigStore(db)
        self.readings = ReadingSink(db)
        self.alerts = AlertStore(db)
        self.devices = DeviceRegistry(db)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _device_lock(self, device_code: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(device_code, threading.Lock())

    # ── Ingestion ─────────────────────────────────────────────────────────────

    def ingest(self, device_code: str, payload: Reading | Mapping[str, object]) -> IngestResult:
        """
        Store one reading for `device_code` and derive alarms and status from it.

        Raises:
            ValidationError: malformed payload, or payload names another device
            DeviceNotFoundError: unknown device code
            ConfigError: thresholds missing or corrupt
        """
        if isinstance(payload, Reading):
            reading = payload
        elif isinstance(payload, Mapping):
            data = dict(payload)
            named = [data[k] for k in ("deviceId", "device_id") if k in data]
            if not named:
                data["deviceId"] = device_code
            mismatched = [n for n in named if n != device_code]
            if mismatched:
                raise ValidationError(f"Reading for {mismatched[0]!r} submitted as {device_code}")
            reading = parse_reading(data)
        else:
            reading = parse_reading(payload)
        if reading.device_id != device_code:
            raise ValidationError(f"Reading for {reading.device_id} submitted as {device_code}")

        self.devices.resolve_id(device_code)
        try:
            thresholds = self.config.get_thresholds()
        except ConfigError:
            logger.error("Cannot evaluate reading for %s: threshold configuration is invalid", device_code)
            raise

        with self._device_lock(device_code), self.db.transaction():
            reading_id = self.readings.append(reading)
            open_alerts = self.alerts.open_for_device(device_code)
            result = evaluate(reading, thresholds, open_alerts)

            created: list[AlarmEvent] = []
            for alarm in result.alarms:
                try:
                    alarm_id = self.alerts.create(alarm)
                except ConflictError:
                    logger.info("Duplicate %s alarm for %s ignored", alarm.alarm_type.value, device_code)
                    continue
                created.append(alarm.model_copy(update={"id": alarm_id}))
                logger.info(
                    "Alarm %s raised for %s: %s (%s)",
                    alarm_id, device_code, alarm.alarm_type.value, alarm.alarm_level.value,
                )
            for alarm in result.suppressed:
                logger.debug("Alarm %s for %s already open", alarm.alarm_type.value, device_code)

            self.devices.set_status(device_code, result.status)

        return IngestResult(
            reading_id=reading_id,
            device_code=device_code,
            status=result.status,
            alarms=created,
        )

    def trigger_test_alarm(self, device_code: str, alarm_type: AlarmType | str) -> AlarmEvent | None:
        """
        Raise a synthetic alarm; returns None when one of that type is already open.
        Device status is raised to at least warning.
        """
        self.devices.resolve_id(device_code)
        alarm = build_test_alarm(device_code, alarm_type, self.config.get_thresholds())

        with self._device_lock(device_code), self.db.transaction():
            try:
                alarm_id = self.alerts.create(alarm)
            except ConflictError:
                logger.info("Test %s alarm for %s skipped, one is already open", alarm.alarm_type.value, device_code)
                return None
            current = self.devices.get(device_code)
            if current is not None and STATUS_ORDER[current.status] < STATUS_ORDER[DeviceStatus.WARNING]:
                self.devices.set_status(device_code, DeviceStatus.WARNING)

        logger.info("Test alarm %s raised for %s", alarm_id, device_code)
        return alarm.model_copy(update={"id": alarm_id})

    # ── Operator actions ──────────────────────────────────────────────────────

    def acknowledge(self, alert_id: int) -> AlarmEvent:
        return self.alerts.update_status(alert_id, AlertStatus.ACKNOWLEDGED)

    def resolve(self, alert_id: int) -> AlarmEvent:
        return self.alerts.update_status(alert_id, AlertStatus.RESOLVED)

    def override_status(self, device_code: str, status: DeviceStatus | str) -> None:
        """Administrative override of a device's status."""
        try:
            status = DeviceStatus(status)
        except ValueError as exc:
            raise ValidationError(f"Invalid device status: {status!r}") from exc
        self.devices.set_status(device_code, status)
        logger.warning("Status of %s overridden to %s", device_code, status.value)

    def update_threshold(self, key: str, value: str | float) -> None:
        self.config.update(key, value)

    # ── Queries ───────────────────────────────────────────────────────────────

    def overview(self) -> SystemOverview:
        return summarize(
            [d.status for d in self.devices.list_devices()],
            self.alerts.open_counts_by_type(),
            self.readings.last_recorded_at(),
        )

    def devices_status(self) -> list[dict]:
        """Every device with its latest reading and open alert count, most severe first."""
        rows = [
            {
                "device": device,
                "latest": self.readings.latest(device.device_code),
                "open_alerts": self.alerts.open_count(device.device_code),
            }
            for device in self.devices.list_devices()
        ]
        rows.sort(key=lambda r: (-STATUS_ORDER[r["device"].status], r["device"].device_code))
        return rows

    def history(self, device_code: str, limit: int = 24) -> pd.DataFrame:
        if self.devices.get(device_code) is None:
            raise DeviceNotFoundError(device_code)
        return self.readings.history(device_code, limit=limit)

    def device_alarms(self, device_code: str, limit: int = 10) -> pd.DataFrame:
        if self.devices.get(device_code) is None:
            raise DeviceNotFoundError(device_code)
        return self.alerts.list_alerts(device_code=device_code, limit=limit)

    def recent_alarms(self, limit: int = 10) -> pd.DataFrame:
        return self.alerts.recent(limit=limit)

"""
src/data/store.py
─────────────────
SQLite data store.

Provides:
  - Database        : owns the connection, schema and transactions
  - ConfigStore     : threshold key → value table
  - ReadingSink     : append-only monitoring readings
  - AlertStore      : alarm events and their lifecycle
  - DeviceRegistry  : device code → internal id, last known status

Every store receives the Database it works on; there is no module-level
connection. Thread safety: check_same_thread=False + a per-Database RLock.
Database.transaction() is re-entrant, only the outermost block commits.
"""
from __future__ import annotations

import logging
import math
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

import pandas as pd

from config.alarms import ALERT_TRANSITIONS, OPEN_STATUSES, AlarmLevel, AlarmType, AlertStatus, DeviceStatus
from config.devices import DEFAULT_DEVICES, DEFAULT_THRESHOLDS, THRESHOLD_KEYS
from config.settings import settings
from src.data.errors import (
    ConflictError,
    DeviceNotFoundError,
    StatusTransitionError,
    ValidationError,
)
from src.data.models import AlarmEvent, Device, Reading, ThresholdConfig

logger = logging.getLogger(__name__)


# ── Schema ────────────────────────────────────────────────────────────────────

_CREATE_DEVICES = """
CREATE TABLE IF NOT EXISTS devices (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    device_code  TEXT NOT NULL UNIQUE,
    name         TEXT NOT NULL DEFAULT '',
    location     TEXT NOT NULL DEFAULT '',
    status       TEXT NOT NULL DEFAULT 'normal',
    updated_at   TEXT
);
"""

_CREATE_READINGS = """
CREATE TABLE IF NOT EXISTS readings (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    device_id         INTEGER NOT NULL REFERENCES devices (id),
    leak_detected     INTEGER NOT NULL,
    humidity_index    REAL NOT NULL,
    vibration_level   REAL NOT NULL,
    displacement      REAL NOT NULL,
    cable_present     INTEGER NOT NULL,
    power_status      INTEGER NOT NULL,
    signal_strength   REAL NOT NULL,
    current_strength  REAL NOT NULL,
    recorded_at       TEXT NOT NULL
);
"""

_CREATE_ALERTS = """
CREATE TABLE IF NOT EXISTS alerts (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    device_id       INTEGER NOT NULL REFERENCES devices (id),
    alarm_type      TEXT NOT NULL,
    alarm_level     TEXT NOT NULL,
    observed_value  TEXT NOT NULL,
    threshold       REAL,
    description     TEXT NOT NULL,
    status          TEXT NOT NULL DEFAULT 'unhandled',
    created_at      TEXT NOT NULL,
    updated_at      TEXT
);
"""

_CREATE_CONFIG = """
CREATE TABLE IF NOT EXISTS system_config (
    config_key    TEXT PRIMARY KEY,
    config_value  TEXT NOT NULL,
    description   TEXT NOT NULL DEFAULT ''
);
"""

# The partial unique index enforces "one open alarm per (device, type)"
_CREATE_IDX = """
CREATE INDEX IF NOT EXISTS idx_readings_dev_ts ON readings (device_id, recorded_at);
CREATE INDEX IF NOT EXISTS idx_alerts_dev_ts   ON alerts   (device_id, created_at);
CREATE UNIQUE INDEX IF NOT EXISTS uq_alerts_open
    ON alerts (device_id, alarm_type) WHERE status != 'resolved';
"""


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


# ── Connection ────────────────────────────────────────────────────────────────

class Database:
    """A sqlite connection plus the lock and transaction depth guarding it."""

    def __init__(self, path: str | None = None):
        self.path = path or settings.DATABASE_URL
        self._lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None
        self._depth = 0

    def connect(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is None:
                self._conn = sqlite3.connect(self.path, check_same_thread=False)
                self._conn.row_factory = sqlite3.Row
                self._conn.execute("PRAGMA foreign_keys = ON")
            return self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> Database:
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            conn = self.connect()
            self._depth += 1
            try:
                yield conn
            except BaseException:
                self._depth -= 1
                if self._depth == 0:
                    conn.rollback()
                raise
            self._depth -= 1
            if self._depth == 0:
                conn.commit()

    def create_tables(self) -> None:
        with self.transaction() as conn:
            conn.executescript(
                _CREATE_DEVICES + _CREATE_READINGS + _CREATE_ALERTS + _CREATE_CONFIG + _CREATE_IDX
            )

    def read_frame(self, sql: str, params: list | tuple = ()) -> pd.DataFrame:
        with self._lock:
            return pd.read_sql_query(sql, self.connect(), params=params)


def initialize_db(db: Database) -> None:
    """
    Create tables, default thresholds and the default device registry.
    Safe to call multiple times (idempotent).
    """
    db.create_tables()
    ConfigStore(db).seed_defaults()
    registry = DeviceRegistry(db)
    with db.transaction():
        for device in DEFAULT_DEVICES:
            if registry.get(device["device_code"]) is None:
                registry.register(**device)


# ── Devices ───────────────────────────────────────────────────────────────────

class DeviceRegistry:
    def __init__(self, db: Database):
        self.db = db

    def register(self, device_code: str, name: str = "", location: str = "") -> int:
        with self.db.transaction() as conn:
            cur = conn.execute(
                "INSERT INTO devices (device_code, name, location, status, updated_at) VALUES (?,?,?,?,?)",
                (device_code, name, location, DeviceStatus.NORMAL.value, _now_iso()),
            )
        return int(cur.lastrowid)

    def resolve_id(self, device_code: str) -> int:
        with self.db.transaction() as conn:
            row = conn.execute("SELECT id FROM devices WHERE device_code = ?", (device_code,)).fetchone()
        if row is None:
            raise DeviceNotFoundError(device_code)
        return int(row["id"])

    def get(self, device_code: str) -> Device | None:
        with self.db.transaction() as conn:
            row = conn.execute("SELECT * FROM devices WHERE device_code = ?", (device_code,)).fetchone()
        return _row_to_device(row) if row else None

    def list_devices(self) -> list[Device]:
        with self.db.transaction() as conn:
            rows = conn.execute("SELECT * FROM devices ORDER BY device_code").fetchall()
        return [_row_to_device(r) for r in rows]

    def set_status(self, device_code: str, status: DeviceStatus) -> None:
        status = DeviceStatus(status)
        with self.db.transaction() as conn:
            cur = conn.execute(
                "UPDATE devices SET status = ?, updated_at = ? WHERE device_code = ?",
                (status.value, _now_iso(), device_code),
            )
        if cur.rowcount == 0:
            raise DeviceNotFoundError(device_code)

    def status_counts(self) -> dict[DeviceStatus, int]:
        with self.db.transaction() as conn:
            rows = conn.execute("SELECT status, COUNT(*) AS n FROM devices GROUP BY status").fetchall()
        return {DeviceStatus(r["status"]): int(r["n"]) for r in rows}


def _row_to_device(row: sqlite3.Row) -> Device:
    return Device(
        device_code=row["device_code"],
        name=row["name"],
        location=row["location"],
        status=DeviceStatus(row["status"]),
        updated_at=_parse_ts(row["updated_at"]),
    )


# ── Configuration ─────────────────────────────────────────────────────────────

class ConfigStore:
    def __init__(self, db: Database):
        self.db = db

    def seed_defaults(self) -> None:
        with self.db.transaction() as conn:
            conn.executemany(
                "INSERT OR IGNORE INTO system_config (config_key, config_value, description) VALUES (?,?,?)",
                [(key, d["value"], d["description"]) for key, d in DEFAULT_THRESHOLDS.items()],
            )

    def get_all(self) -> dict[str, str]:
        with self.db.transaction() as conn:
            rows = conn.execute("SELECT config_key, config_value FROM system_config").fetchall()
        return {r["config_key"]: r["config_value"] for r in rows}

    def get_thresholds(self) -> ThresholdConfig:
        """Read thresholds fresh from the table; ConfigError if any is missing or corrupt."""
        return ThresholdConfig.from_mapping(self.get_all())

    def update(self, key: str, value: str | float) -> None:
        if key not in THRESHOLD_KEYS:
            raise ValidationError(f"Unknown configuration key: {key}")
        if isinstance(value, bool) or value is None or str(value).strip() == "":
            raise ValidationError(f"Configuration value for {key} cannot be empty")
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Configuration value for {key} must be numeric: {value!r}") from exc
        if not math.isfinite(number) or number <= 0:
            raise ValidationError(f"Configuration value for {key} must be a positive number: {value!r}")

        with self.db.transaction() as conn:
            conn.execute(
                """INSERT INTO system_config (config_key, config_value) VALUES (?, ?)
                   ON CONFLICT (config_key) DO UPDATE SET config_value = excluded.config_value""",
                (key, f"{number:g}"),
            )
        logger.info("Configuration %s updated to %g", key, number)


# ── Readings ──────────────────────────────────────────────────────────────────

class ReadingSink:
    def __init__(self, db: Database):
        self.db = db
        self.devices = DeviceRegistry(db)

    def append(self, reading: Reading) -> int:
        with self.db.transaction() as conn:
            device_pk = self.devices.resolve_id(reading.device_id)
            cur = conn.execute(
                """INSERT INTO readings
                   (device_id, leak_detected, humidity_index, vibration_level,
                    displacement, cable_present, power_status,
                    signal_strength, current_strength, recorded_at)
                   VALUES (?,?,?,?,?,?,?,?,?,?)""",
                (
                    device_pk,
                    int(reading.leak_detected),
                    reading.humidity_index,
                    reading.vibration_level,
                    reading.displacement,
                    int(reading.cable_present),
                    int(reading.power_status),
                    reading.signal_strength,
                    reading.current_strength,
                    reading.recorded_at.isoformat(),
                ),
            )
        return int(cur.lastrowid)

    def latest(self, device_code: str) -> dict | None:
        """Return the most recent reading for a device as a dict."""
        with self.db.transaction() as conn:
            row = conn.execute(
                """SELECT r.*, d.device_code FROM readings r
                   JOIN devices d ON r.device_id = d.id
                   WHERE d.device_code = ?
                   ORDER BY r.recorded_at DESC, r.id DESC LIMIT 1""",
                (device_code,),
            ).fetchone()
        return dict(row) if row else None

    def history(self, device_code: str, limit: int = 24) -> pd.DataFrame:
        """Fetch the last `limit` readings for a device, newest first."""
        df = self.db.read_frame(
            """SELECT r.*, d.device_code FROM readings r
               JOIN devices d ON r.device_id = d.id
               WHERE d.device_code = ?
               ORDER BY r.recorded_at DESC, r.id DESC
               LIMIT ?""",
            (device_code, int(limit)),
        )
        if not df.empty:
            df["recorded_at"] = pd.to_datetime(df["recorded_at"], utc=True, format="ISO8601")
        return df

    def last_recorded_at(self) -> datetime | None:
        with self.db.transaction() as conn:
            row = conn.execute("SELECT MAX(recorded_at) AS last FROM readings").fetchone()
        return _parse_ts(row["last"])

    def count(self, device_code: str | None = None) -> int:
        sql = "SELECT COUNT(*) FROM readings r JOIN devices d ON r.device_id = d.id"
        params: list = []
        if device_code:
            sql += " WHERE d.device_code = ?"
            params.append(device_code)
        with self.db.transaction() as conn:
            return conn.execute(sql, params).fetchone()[0]


# ── Alerts ────────────────────────────────────────────────────────────────────

_OPEN_SQL = "(" + ", ".join(f"'{s.value}'" for s in OPEN_STATUSES) + ")"

_ALERT_SELECT = """SELECT a.*, d.device_code FROM alerts a
                   JOIN devices d ON a.device_id = d.id"""


def _observed(value: str) -> float | str:
    try:
        return float(value)
    except ValueError:
        return value


def _row_to_alarm(row: sqlite3.Row) -> AlarmEvent:
    return AlarmEvent(
        id=row["id"],
        device_id=row["device_code"],
        alarm_type=AlarmType(row["alarm_type"]),
        alarm_level=AlarmLevel(row["alarm_level"]),
        observed_value=_observed(row["observed_value"]),
        threshold=row["threshold"],
        description=row["description"],
        status=AlertStatus(row["status"]),
        created_at=_parse_ts(row["created_at"]),
    )


class AlertStore:
    def __init__(self, db: Database):
        self.db = db
        self.devices = DeviceRegistry(db)

    def create(self, event: AlarmEvent) -> int:
        """
        Insert a new alarm. Raises ConflictError when an open alarm of the same
        (device, type) already exists.
        """
        with self.db.transaction() as conn:
            device_pk = self.devices.resolve_id(event.device_id)
            try:
                cur = conn.execute(
                    """INSERT INTO alerts
                       (device_id, alarm_type, alarm_level, observed_value,
                        threshold, description, status, created_at)
                       VALUES (?,?,?,?,?,?,?,?)""",
                    (
                        device_pk,
                        event.alarm_type.value,
                        event.alarm_level.value,
                        str(event.observed_value),
                        event.threshold,
                        event.description,
                        event.status.value,
                        event.created_at.isoformat(),
                    ),
                )
            except sqlite3.IntegrityError as exc:
                if "uq_alerts_open" in str(exc) or "alerts.device_id, alerts.alarm_type" in str(exc):
                    raise ConflictError(
                        f"Open {event.alarm_type.value} alarm already exists for {event.device_id}"
                    ) from exc
                raise
        return int(cur.lastrowid)

    def get(self, alert_id: int) -> AlarmEvent | None:
        with self.db.transaction() as conn:
            row = conn.execute(f"{_ALERT_SELECT} WHERE a.id = ?", (alert_id,)).fetchone()
        return _row_to_alarm(row) if row else None

    def find_open(self, device_code: str, alarm_type: AlarmType) -> AlarmEvent | None:
        with self.db.transaction() as conn:
            row = conn.execute(
                f"""{_ALERT_SELECT}
                    WHERE d.device_code = ? AND a.alarm_type = ? AND a.status IN {_OPEN_SQL}
                    LIMIT 1""",
                (device_code, AlarmType(alarm_type).value),
            ).fetchone()
        return _row_to_alarm(row) if row else None

    def open_for_device(self, device_code: str) -> list[AlarmEvent]:
        with self.db.transaction() as conn:
            rows = conn.execute(
                f"{_ALERT_SELECT} WHERE d.device_code = ? AND a.status IN {_OPEN_SQL} ORDER BY a.id",
                (device_code,),
            ).fetchall()
        return [_row_to_alarm(r) for r in rows]

    def update_status(self, alert_id: int, status: AlertStatus) -> AlarmEvent:
        """
        Move an alert along unhandled → acknowledged → resolved.
        Setting the current status again is a no-op.
        """
        try:
            status = AlertStatus(status)
        except ValueError as exc:
            raise ValidationError(f"Invalid alert status: {status!r}") from exc

        with self.db.transaction() as conn:
            current = self.get(alert_id)
            if current is None:
                raise ValidationError(f"Alert {alert_id} does not exist")
            if current.status is status:
                return current
            if status not in ALERT_TRANSITIONS[current.status]:
                raise StatusTransitionError(
                    f"Alert {alert_id} cannot move from {current.status.value} to {status.value}"
                )
            conn.execute(
                "UPDATE alerts SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, _now_iso(), alert_id),
            )
        logger.info("Alert %s %s -> %s", alert_id, current.status.value, status.value)
        return current.model_copy(update={"status": status})

    def list_alerts(
        self,
        status: AlertStatus | str | None = None,
        device_code: str | None = None,
        alarm_type: AlarmType | str | None = None,
        limit: int = 500,
    ) -> pd.DataFrame:
        """Fetch alerts with optional filters, newest first."""
        where: list[str] = []
        params: list = []

        if status == "open":
            where.append(f"a.status IN {_OPEN_SQL}")
        elif status:
            where.append("a.status = ?")
            params.append(AlertStatus(status).value)
        if device_code:
            where.append("d.device_code = ?")
            params.append(device_code)
        if alarm_type:
            where.append("a.alarm_type = ?")
            params.append(AlarmType(alarm_type).value)

        sql = _ALERT_SELECT
        if where:
            sql += f" WHERE {' AND '.join(where)}"
        sql += " ORDER BY a.created_at DESC, a.id DESC LIMIT ?"
        params.append(int(limit))

        df = self.db.read_frame(sql, params)
        if not df.empty:
            df["created_at"] = pd.to_datetime(df["created_at"], utc=True, format="ISO8601")
        return df

    def recent(self, limit: int = 10) -> pd.DataFrame:
        return self.list_alerts(limit=limit)

    def open_counts_by_type(self) -> dict[AlarmType, int]:
        with self.db.transaction() as conn:
            rows = conn.execute(
                f"SELECT alarm_type, COUNT(*) AS n FROM alerts WHERE status IN {_OPEN_SQL} GROUP BY alarm_type"
            ).fetchall()
        return {AlarmType(r["alarm_type"]): int(r["n"]) for r in rows}

    def open_count(self, device_code: str | None = None) -> int:
        """Count unhandled + acknowledged alerts."""
        sql = f"SELECT COUNT(*) FROM alerts a JOIN devices d ON a.device_id = d.id WHERE a.status IN {_OPEN_SQL}"
        params: list = []
        if device_code:
            sql += " AND d.device_code = ?"
            params.append(device_code)
        with self.db.transaction() as conn:
            return conn.execute(sql, params).fetchone()[0]

"""
tests/test_store.py
────────────────────
Tests for the SQLite store: registry, config, readings and alert lifecycle.
"""
from datetime import UTC, datetime, timedelta

import pytest

from config.alarms import AlarmLevel, AlarmType, AlertStatus, DeviceStatus
from config.devices import DEVICE_CODES
from src.data.errors import ConfigError, ConflictError, DeviceNotFoundError, StatusTransitionError, ValidationError
from src.data.models import AlarmEvent, Reading
from src.data.store import AlertStore, ConfigStore, DeviceRegistry, ReadingSink, initialize_db


def _alarm(alarm_type=AlarmType.LEAK, device="CH-001", **kw):
    return AlarmEvent(
        device_id=device,
        alarm_type=alarm_type,
        alarm_level=kw.pop("alarm_level", AlarmLevel.WARNING),
        observed_value=kw.pop("observed_value", "leak detected"),
        threshold=kw.pop("threshold", 80.0),
        description="test",
        **kw,
    )


class TestInitialize:
    def test_default_devices_registered(self, db):
        codes = [d.device_code for d in DeviceRegistry(db).list_devices()]
        assert codes == sorted(DEVICE_CODES)

    def test_idempotent(self, db):
        initialize_db(db)
        assert len(DeviceRegistry(db).list_devices()) == len(DEVICE_CODES)
        assert ConfigStore(db).get_thresholds().vibration_threshold == 30.0


class TestDeviceRegistry:
    def test_resolve_unknown_device(self, db):
        with pytest.raises(DeviceNotFoundError):
            DeviceRegistry(db).resolve_id("NOPE")

    def test_set_status(self, db):
        registry = DeviceRegistry(db)
        registry.set_status("CH-002", DeviceStatus.CRITICAL)
        assert registry.get("CH-002").status == DeviceStatus.CRITICAL
        assert registry.status_counts()[DeviceStatus.CRITICAL] == 1

    def test_set_status_unknown_device(self, db):
        with pytest.raises(DeviceNotFoundError):
            DeviceRegistry(db).set_status("NOPE", DeviceStatus.NORMAL)


class TestConfigStore:
    def test_update_threshold(self, db):
        store = ConfigStore(db)
        store.update("vibration_threshold", "45.5")
        assert store.get_thresholds().vibration_threshold == 45.5

    @pytest.mark.parametrize("key, value", [
        ("unknown_key", "1"),
        ("vibration_threshold", ""),
        ("vibration_threshold", "abc"),
        ("vibration_threshold", -3),
        ("vibration_threshold", None),
    ])
    def test_update_rejects_bad_input(self, db, key, value):
        store = ConfigStore(db)
        with pytest.raises(ValidationError):
            store.update(key, value)
        assert store.get_thresholds().vibration_threshold == 30.0

    def test_corrupt_row_is_config_error(self, db):
        with db.transaction() as conn:
            conn.execute("UPDATE system_config SET config_value = 'n/a' WHERE config_key = 'humidity_threshold'")
        with pytest.raises(ConfigError):
            ConfigStore(db).get_thresholds()

    def test_missing_row_is_config_error(self, db):
        with db.transaction() as conn:
            conn.execute("DELETE FROM system_config WHERE config_key = 'displacement_threshold'")
        with pytest.raises(ConfigError):
            ConfigStore(db).get_thresholds()


class TestReadingSink:
    def test_append_and_latest(self, db, make_reading):
        sink = ReadingSink(db)
        sink.append(make_reading(vibration_level=1.0))
        sink.append(make_reading(vibration_level=2.0))
        latest = sink.latest("CH-001")
        # Same recorded_at: ties go to the later insert
        assert latest["vibration_level"] == 2.0
        assert sink.count("CH-001") == 2

    def test_latest_orders_by_recorded_at(self, db, make_reading, now):
        sink = ReadingSink(db)
        sink.append(make_reading(vibration_level=5.0, recorded_at=now + timedelta(minutes=5)))
        sink.append(make_reading(vibration_level=1.0, recorded_at=now))
        assert sink.latest("CH-001")["vibration_level"] == 5.0
        assert sink.last_recorded_at() == now + timedelta(minutes=5)

    def test_latest_compares_instants_across_offsets(self, db, nominal_payload):
        sink = ReadingSink(db)
        # 05:00 UTC is later than 10:00+08:00 (02:00 UTC) despite sorting lower as text
        sink.append(Reading.model_validate(
            {**nominal_payload, "vibrationLevel": 2.0, "recordedAt": "2024-06-01T05:00:00+00:00"}
        ))
        sink.append(Reading.model_validate(
            {**nominal_payload, "vibrationLevel": 1.0, "recordedAt": "2024-06-01T10:00:00+08:00"}
        ))
        assert sink.latest("CH-001")["vibration_level"] == 2.0
        assert sink.last_recorded_at() == datetime(2024, 6, 1, 5, 0, tzinfo=UTC)
        assert list(sink.history("CH-001")["vibration_level"]) == [2.0, 1.0]

    def test_history_newest_first_with_limit(self, db, make_reading, now):
        sink = ReadingSink(db)
        for i in range(5):
            sink.append(make_reading(vibration_level=float(i), recorded_at=now + timedelta(minutes=i)))
        df = sink.history("CH-001", limit=3)
        assert list(df["vibration_level"]) == [4.0, 3.0, 2.0]

    def test_latest_for_device_without_readings(self, db):
        assert ReadingSink(db).latest("CH-003") is None
        assert ReadingSink(db).history("CH-003").empty

    def test_append_unknown_device(self, db, make_reading):
        with pytest.raises(DeviceNotFoundError):
            ReadingSink(db).append(make_reading(device_id="NOPE"))


class TestAlertStore:
    def test_create_and_find_open(self, db):
        store = AlertStore(db)
        alert_id = store.create(_alarm())
        found = store.find_open("CH-001", AlarmType.LEAK)
        assert found.id == alert_id
        assert found.observed_value == "leak detected"
        assert store.find_open("CH-001", AlarmType.VIBRATION) is None

    def test_numeric_observed_value_round_trips_as_float(self, db):
        store = AlertStore(db)
        alert_id = store.create(_alarm(AlarmType.VIBRATION, observed_value=52.5, threshold=40.0))
        assert store.get(alert_id).observed_value == 52.5

    def test_unique_guard_raises_conflict(self, db):
        store = AlertStore(db)
        store.create(_alarm())
        with pytest.raises(ConflictError):
            store.create(_alarm())
        assert store.open_count("CH-001") == 1

    def test_same_type_on_other_device_is_allowed(self, db):
        store = AlertStore(db)
        store.create(_alarm(device="CH-001"))
        store.create(_alarm(device="CH-002"))
        assert store.open_count() == 2

    def test_new_alarm_allowed_after_resolution(self, db):
        store = AlertStore(db)
        first = store.create(_alarm())
        store.update_status(first, AlertStatus.RESOLVED)
        second = store.create(_alarm())
        assert second != first
        assert store.find_open("CH-001", AlarmType.LEAK).id == second

    def test_lifecycle(self, db):
        store = AlertStore(db)
        alert_id = store.create(_alarm())
        assert store.update_status(alert_id, AlertStatus.ACKNOWLEDGED).status == AlertStatus.ACKNOWLEDGED
        assert store.find_open("CH-001", AlarmType.LEAK) is not None
        assert store.update_status(alert_id, AlertStatus.RESOLVED).status == AlertStatus.RESOLVED
        assert store.find_open("CH-001", AlarmType.LEAK) is None

    @pytest.mark.parametrize("path", [
        [AlertStatus.RESOLVED, AlertStatus.ACKNOWLEDGED],
        [AlertStatus.RESOLVED, AlertStatus.UNHANDLED],
        [AlertStatus.ACKNOWLEDGED, AlertStatus.UNHANDLED],
    ])
    def test_backward_transitions_rejected(self, db, path):
        store = AlertStore(db)
        alert_id = store.create(_alarm())
        for status in path[:-1]:
            store.update_status(alert_id, status)
        with pytest.raises(StatusTransitionError):
            store.update_status(alert_id, path[-1])

    def test_same_status_is_noop(self, db):
        store = AlertStore(db)
        alert_id = store.create(_alarm())
        assert store.update_status(alert_id, AlertStatus.UNHANDLED).status == AlertStatus.UNHANDLED

    def test_unknown_alert(self, db):
        with pytest.raises(ValidationError):
            AlertStore(db).update_status(999, AlertStatus.RESOLVED)

    def test_list_alerts_filters(self, db):
        store = AlertStore(db)
        a = store.create(_alarm(AlarmType.LEAK, device="CH-001"))
        store.create(_alarm(AlarmType.VIBRATION, device="CH-001", observed_value=45.0))
        store.create(_alarm(AlarmType.LEAK, device="CH-002"))
        store.update_status(a, AlertStatus.RESOLVED)

        assert len(store.list_alerts()) == 3
        assert len(store.list_alerts(status="open")) == 2
        assert len(store.list_alerts(status=AlertStatus.RESOLVED)) == 1
        assert len(store.list_alerts(device_code="CH-001")) == 2
        assert len(store.list_alerts(alarm_type="leak")) == 2
        assert list(store.list_alerts(device_code="CH-002")["device_code"]) == ["CH-002"]

    def test_open_counts_by_type(self, db):
        store = AlertStore(db)
        store.create(_alarm(AlarmType.LEAK, device="CH-001"))
        store.create(_alarm(AlarmType.LEAK, device="CH-002"))
        resolved = store.create(_alarm(AlarmType.POWER_LOSS, device="CH-001"))
        store.update_status(resolved, AlertStatus.RESOLVED)
        assert store.open_counts_by_type() == {AlarmType.LEAK: 2}


class TestTransaction:
    def test_rollback_on_error(self, db, make_reading):
        sink = ReadingSink(db)
        with pytest.raises(RuntimeError):
            with db.transaction():
                sink.append(make_reading())
                raise RuntimeError("boom")
        assert sink.count() == 0

    def test_nested_blocks_commit_once(self, db, make_reading):
        sink = ReadingSink(db)
        with db.transaction():
            sink.append(make_reading())
            with db.transaction():
                sink.append(make_reading())
        assert sink.count() == 2

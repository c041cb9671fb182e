"""
tests/test_simulator.py
────────────────────────
Tests for the synthetic data simulator.
"""
import pandas as pd

from config.devices import DEVICE_CODES
from src.data.simulator import (
    generate_history,
    generate_reading,
    generate_realtime_reading,
    seed_history,
    to_dataframe,
)

CODES = ["CH-001", "CH-002"]


class TestGenerateReading:
    def test_nominal_when_anomalies_disabled(self, rng, now):
        for _ in range(50):
            reading = generate_reading("CH-001", rng, now, anomaly_rate=0.0)
            assert reading.device_id == "CH-001"
            assert reading.recorded_at == now
            assert not reading.leak_detected
            assert reading.cable_present
            assert reading.power_status
            assert 0.0 <= reading.humidity_index <= 100.0
            assert reading.vibration_level >= 0.0

    def test_every_excursion_when_forced(self, rng, now):
        reading = generate_reading("CH-001", rng, now, anomaly_rate=3.0)
        assert reading.leak_detected
        assert reading.vibration_level > 30.0
        assert reading.displacement > 10.0
        assert not reading.cable_present
        assert not reading.power_status


class TestGenerateHistory:
    def test_returns_every_device(self):
        history = generate_history(CODES, seed=42, days=1)
        assert set(history) == set(CODES)

    def test_correct_reading_count(self):
        history = generate_history(CODES, seed=42, days=2, per_hour=2)
        assert len(history["CH-001"]) == 2 * 24 * 2

    def test_readings_are_chronological(self):
        history = generate_history(CODES, seed=42, days=1)
        timestamps = [r.recorded_at for r in history["CH-002"]]
        assert timestamps == sorted(timestamps)
        assert all(ts.tzinfo is not None for ts in timestamps)

    def test_reproducibility(self):
        h1 = generate_history(CODES, seed=99, days=1)
        h2 = generate_history(CODES, seed=99, days=1)
        for r1, r2 in zip(h1["CH-001"], h2["CH-001"], strict=True):
            assert r1.vibration_level == r2.vibration_level
            assert r1.humidity_index == r2.humidity_index

    def test_different_seeds_differ(self):
        h1 = generate_history(CODES, seed=1, days=1)
        h2 = generate_history(CODES, seed=2, days=1)
        diffs = [
            r1.vibration_level != r2.vibration_level
            for r1, r2 in zip(h1["CH-001"], h2["CH-001"], strict=True)
        ]
        assert any(diffs)


class TestRealtimeReading:
    def test_generates_valid_reading(self):
        reading = generate_realtime_reading("CH-004")
        assert reading.device_id == "CH-004"
        assert reading.recorded_at.tzinfo is not None


class TestSeedHistory:
    def test_seeds_empty_database_once(self, service):
        ingested = seed_history(service, days=1, seed=7)
        assert ingested == len(DEVICE_CODES) * 24 * 4
        assert service.readings.count() == ingested
        assert seed_history(service, days=1, seed=7) == 0

    def test_seeded_alarms_are_unique_per_type(self, service):
        seed_history(service, days=1, seed=7)
        df = service.alerts.list_alerts(status="open")
        assert not df.duplicated(subset=["device_code", "alarm_type"]).any()


class TestToDataframe:
    def test_returns_dataframe(self):
        history = generate_history(CODES, seed=42, days=1)
        df = to_dataframe(history["CH-001"])
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 24 * 4
        assert {"vibration_level", "leak_detected", "recorded_at"} <= set(df.columns)

"""
src/data/simulator.py
─────────────────────
Synthetic sensor data generator for cable-channel monitoring devices.

Generates:
  - Mostly nominal readings with occasional excursions (leak, vibration
    spikes, displacement drift, cable/power dropouts)
  - A seeded history fed through MonitoringService.ingest, so stored alarms
    follow exactly the same rules as live data

Design:
  - Reproducible with SIMULATION_SEED for consistent demos
  - Each excursion is drawn independently per reading with `anomaly_rate`
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import numpy as np
import pandas as pd

from config.settings import settings
from src.data.models import Reading

logger = logging.getLogger(__name__)

# ── Baseline operating point ──────────────────────────────────────────────────

BASELINE: dict[str, float] = {
    "humidity_index": 55.0,     # %
    "vibration_level": 12.0,    # Hz
    "displacement": 2.0,        # mm
    "signal_strength": 85.0,    # %
    "current_strength": 75.0,   # %
}

# Noise scales for normal operation (σ)
NOISE: dict[str, float] = {
    "humidity_index": 4.0,
    "vibration_level": 3.0,
    "displacement": 1.2,
    "signal_strength": 4.0,
    "current_strength": 5.0,
}


def generate_reading(
    device_code: str,
    rng: np.random.Generator,
    recorded_at: datetime | None = None,
    anomaly_rate: float = 0.03,
) -> Reading:
    """Draw one reading around the baseline, with random excursions."""
    values = {k: BASELINE[k] + rng.normal(0, NOISE[k]) for k in BASELINE}
    leak = False
    cable = True
    power = True

    if rng.random() < anomaly_rate:
        leak = True
        values["humidity_index"] = rng.uniform(80.0, 99.0)
    if rng.random() < anomaly_rate:
        values["vibration_level"] = rng.uniform(32.0, 60.0)
    if rng.random() < anomaly_rate:
        values["displacement"] = rng.uniform(10.5, 20.0)
    if rng.random() < anomaly_rate / 3:
        cable = False
        values["signal_strength"] = rng.uniform(0.0, 30.0)
    if rng.random() < anomaly_rate / 3:
        power = False
        values["current_strength"] = rng.uniform(0.0, 10.0)

    return Reading(
        device_id=device_code,
        leak_detected=leak,
        humidity_index=round(float(np.clip(values["humidity_index"], 0.0, 100.0)), 1),
        vibration_level=round(float(max(values["vibration_level"], 0.0)), 2),
        displacement=round(float(values["displacement"]), 2),
        cable_present=cable,
        power_status=power,
        signal_strength=round(float(np.clip(values["signal_strength"], 0.0, 100.0)), 1),
        current_strength=round(float(np.clip(values["current_strength"], 0.0, 100.0)), 1),
        recorded_at=recorded_at or datetime.now(tz=UTC),
    )


def generate_history(
    device_codes: list[str],
    seed: int = settings.SIMULATION_SEED,
    days: int = settings.HISTORY_DAYS,
    per_hour: int = 4,
) -> dict[str, list[Reading]]:
    """
    Generate `days` × 24 × `per_hour` readings for each device.
    Returns dict keyed by device code, chronological.
    """
    rng = np.random.default_rng(seed)
    total = days * 24 * per_hour
    step = timedelta(minutes=60 // per_hour)
    end_ts = datetime.now(tz=UTC).replace(second=0, microsecond=0)
    start_ts = end_ts - step * (total - 1)

    return {
        code: [generate_reading(code, rng, start_ts + step * i) for i in range(total)]
        for code in device_codes
    }


def generate_realtime_reading(device_code: str, anomaly_rate: float = 0.1) -> Reading:
    """
    Generate a single fresh reading that simulates a live sensor update.
    Uses a random seed based on current time for slight variation.
    """
    seed = int(datetime.now(tz=UTC).timestamp() * 1000) % 100_000
    return generate_reading(device_code, np.random.default_rng(seed), anomaly_rate=anomaly_rate)


def seed_history(service, days: int = settings.HISTORY_DAYS, seed: int = settings.SIMULATION_SEED) -> int:
    """
    Populate an empty database with simulated readings for every registered device.
    Returns the number of readings ingested; 0 if readings already exist.
    """
    if service.readings.count() > 0:
        return 0

    codes = [d.device_code for d in service.devices.list_devices()]
    history = generate_history(codes, seed=seed, days=days)
    ingested = 0
    for reading_list in history.values():
        for reading in reading_list:
            service.ingest(reading.device_id, reading)
            ingested += 1
    logger.info("Seeded %d simulated readings for %d devices", ingested, len(codes))
    return ingested


def to_dataframe(readings: list[Reading]) -> pd.DataFrame:
    """Convert a list of Readings to a pandas DataFrame."""
    return pd.DataFrame([r.model_dump() for r in readings])

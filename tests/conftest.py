"""
tests/conftest.py
─────────────────
Shared pytest fixtures for the Cable Monitor test suite.
"""
import os
from datetime import datetime, timezone

import numpy as np
import pytest

# Use in-memory SQLite for tests
os.environ.setdefault("DATABASE_URL", ":memory:")
os.environ.setdefault("HISTORY_DAYS", "1")
os.environ.setdefault("SIMULATION_SEED", "42")


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def thresholds():
    from src.data.models import ThresholdConfig
    return ThresholdConfig(vibration_threshold=40.0, displacement_threshold=10.0, humidity_threshold=80.0)


@pytest.fixture
def nominal_payload(now) -> dict:
    """A reading with every flag nominal and every numeric under threshold."""
    return {
        "deviceId": "CH-001",
        "leakDetected": False,
        "humidityIndex": 55.0,
        "vibrationLevel": 12.0,
        "displacement": 2.0,
        "cablePresent": True,
        "powerStatus": True,
        "signalStrength": 85.0,
        "currentStrength": 75.0,
        "recordedAt": now.isoformat(),
    }


@pytest.fixture
def make_reading(nominal_payload):
    """Factory: nominal reading with selected fields overridden (snake_case names)."""
    from src.data.models import Reading

    def _make(**overrides):
        return Reading.model_validate(nominal_payload).model_copy(update=overrides)

    return _make


@pytest.fixture
def db():
    from src.data.store import Database, initialize_db
    with Database(":memory:") as database:
        initialize_db(database)
        yield database


@pytest.fixture
def service(db):
    from src.services.monitoring import MonitoringService
    return MonitoringService(db)

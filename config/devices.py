"""
config/devices.py
─────────────────
Default threshold values and the device registry seeded on first run.

Thresholds are stored in the `system_config` table and re-read on every
evaluation; the values below only populate an empty database.
"""

# ── Threshold keys ────────────────────────────────────────────────────────────
VIBRATION_THRESHOLD = "vibration_threshold"      # Hz
DISPLACEMENT_THRESHOLD = "displacement_threshold"  # mm
HUMIDITY_THRESHOLD = "humidity_threshold"        # %

THRESHOLD_KEYS: tuple[str, ...] = (
    VIBRATION_THRESHOLD,
    DISPLACEMENT_THRESHOLD,
    HUMIDITY_THRESHOLD,
)

DEFAULT_THRESHOLDS: dict[str, dict[str, str]] = {
    VIBRATION_THRESHOLD: {"value": "30", "description": "Vibration alarm threshold (Hz)"},
    DISPLACEMENT_THRESHOLD: {"value": "10", "description": "Displacement alarm threshold (mm)"},
    HUMIDITY_THRESHOLD: {"value": "80", "description": "Humidity reference for leak alarms (%)"},
}

THRESHOLD_UNITS: dict[str, str] = {
    VIBRATION_THRESHOLD: "Hz",
    DISPLACEMENT_THRESHOLD: "mm",
    HUMIDITY_THRESHOLD: "%",
}

# ── Device registry ───────────────────────────────────────────────────────────
DEFAULT_DEVICES: list[dict[str, str]] = [
    {"device_code": "CH-001", "name": "Channel 1 east", "location": "Tunnel A, km 0.2"},
    {"device_code": "CH-002", "name": "Channel 1 west", "location": "Tunnel A, km 0.8"},
    {"device_code": "CH-003", "name": "Channel 2 junction", "location": "Tunnel B, shaft 3"},
    {"device_code": "CH-004", "name": "Channel 2 outlet", "location": "Tunnel B, km 1.4"},
]

DEVICE_CODES = [d["device_code"] for d in DEFAULT_DEVICES]

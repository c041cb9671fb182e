"""
config/alarms.py
────────────────
Alarm types, levels, alert lifecycle states and display configuration.
"""

from enum import Enum

from config.settings import settings


class AlarmType(str, Enum):
    LEAK = "leak"
    VIBRATION = "vibration"
    DISPLACEMENT = "displacement"
    CABLE_MISSING = "cable_missing"
    POWER_LOSS = "power_loss"


class AlarmLevel(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    UNHANDLED = "unhandled"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class DeviceStatus(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


OPEN_STATUSES: frozenset[AlertStatus] = frozenset(
    {AlertStatus.UNHANDLED, AlertStatus.ACKNOWLEDGED}
)

# Allowed operator transitions; resolved is terminal
ALERT_TRANSITIONS: dict[AlertStatus, frozenset[AlertStatus]] = {
    AlertStatus.UNHANDLED: frozenset({AlertStatus.ACKNOWLEDGED, AlertStatus.RESOLVED}),
    AlertStatus.ACKNOWLEDGED: frozenset({AlertStatus.RESOLVED}),
    AlertStatus.RESOLVED: frozenset(),
}

# A numeric reading above threshold × ESCALATION_FACTOR is critical
ESCALATION_FACTOR = 1.5

STATUS_COLORS: dict[str, str] = {
    DeviceStatus.NORMAL: "#2ea44f",
    DeviceStatus.WARNING: "#e8a020",
    DeviceStatus.CRITICAL: "#da3633",
}

LEVEL_COLORS: dict[str, str] = {
    AlarmLevel.WARNING: "#e8a020",
    AlarmLevel.CRITICAL: "#da3633",
}

ALERT_STATUS_COLORS: dict[str, str] = {
    AlertStatus.UNHANDLED: "#da3633",
    AlertStatus.ACKNOWLEDGED: "#e8a020",
    AlertStatus.RESOLVED: "#2ea44f",
}

LABELS_EN: dict[str, str] = {
    AlarmType.LEAK: "Leak",
    AlarmType.VIBRATION: "Vibration",
    AlarmType.DISPLACEMENT: "Displacement",
    AlarmType.CABLE_MISSING: "Cable missing",
    AlarmType.POWER_LOSS: "Power loss",
    AlarmLevel.WARNING: "Warning",
    AlarmLevel.CRITICAL: "Critical",
    AlertStatus.UNHANDLED: "Unhandled",
    AlertStatus.ACKNOWLEDGED: "Acknowledged",
    AlertStatus.RESOLVED: "Resolved",
    DeviceStatus.NORMAL: "Normal",
}

LABELS_ZH: dict[str, str] = {
    AlarmType.LEAK: "漏水",
    AlarmType.VIBRATION: "震动",
    AlarmType.DISPLACEMENT: "位移",
    AlarmType.CABLE_MISSING: "电缆缺失",
    AlarmType.POWER_LOSS: "断电",
    AlarmLevel.WARNING: "警告",
    AlarmLevel.CRITICAL: "严重",
    AlertStatus.UNHANDLED: "未处理",
    AlertStatus.ACKNOWLEDGED: "已确认",
    AlertStatus.RESOLVED: "已处理",
    DeviceStatus.NORMAL: "正常",
}

# Severity ordering for sorting (higher = more severe)
STATUS_ORDER: dict[str, int] = {
    DeviceStatus.CRITICAL: 3,
    DeviceStatus.WARNING: 2,
    DeviceStatus.NORMAL: 1,
}


def label(value: str, lang: str | None = None) -> str:
    """Display label for any alarm/status enum value."""
    table = LABELS_ZH if (lang or settings.DEFAULT_LANG) == "zh" else LABELS_EN
    return table.get(value, str(value).replace("_", " ").capitalize())


MAX_ALERTS_DISPLAY = 100

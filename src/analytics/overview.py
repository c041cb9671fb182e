"""
src/analytics/overview.py
─────────────────────────
Fleet-level status summary for the dashboard overview.

  system status = critical  if any device is critical or more than half are abnormal
                = warning   if any device is abnormal or any alert is open
                = normal    otherwise
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime

from config.alarms import AlarmType, DeviceStatus
from src.data.models import SystemOverview

_TYPE_FIELDS = {
    AlarmType.LEAK: "leak_alerts",
    AlarmType.VIBRATION: "vibration_alerts",
    AlarmType.DISPLACEMENT: "displacement_alerts",
    AlarmType.CABLE_MISSING: "cable_alerts",
    AlarmType.POWER_LOSS: "power_alerts",
}


def system_status(total_devices: int, statuses: Iterable[DeviceStatus], open_alerts: int) -> DeviceStatus:
    statuses = [DeviceStatus(s) for s in statuses]
    abnormal = sum(1 for s in statuses if s is not DeviceStatus.NORMAL)
    if DeviceStatus.CRITICAL in statuses or abnormal > total_devices / 2:
        return DeviceStatus.CRITICAL
    if abnormal > 0 or open_alerts > 0:
        return DeviceStatus.WARNING
    return DeviceStatus.NORMAL


def summarize(
    device_statuses: Iterable[DeviceStatus | str],
    open_alert_counts: Mapping[AlarmType | str, int],
    last_check: datetime | None = None,
) -> SystemOverview:
    """
    Build a SystemOverview from current device statuses and open alert counts.

    Args:
        device_statuses: One status per registered device
        open_alert_counts: Open (unhandled + acknowledged) alert count per alarm type
        last_check: Timestamp of the most recent stored reading
    """
    statuses = [DeviceStatus(s) for s in device_statuses]
    counts = {AlarmType(k): int(v) for k, v in open_alert_counts.items()}
    total_open = sum(counts.values())

    per_type = {field: counts.get(alarm_type, 0) for alarm_type, field in _TYPE_FIELDS.items()}

    return SystemOverview(
        system_status=system_status(len(statuses), statuses, total_open),
        total_devices=len(statuses),
        abnormal_devices=sum(1 for s in statuses if s is not DeviceStatus.NORMAL),
        open_alerts=total_open,
        last_check_time=last_check,
        **per_type,
    )

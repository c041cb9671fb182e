"""
tests/test_overview.py
───────────────────────
Tests for the fleet overview summary.
"""
from datetime import datetime, timezone

from config.alarms import AlarmType, DeviceStatus
from src.analytics.overview import summarize, system_status

N, W, C = DeviceStatus.NORMAL, DeviceStatus.WARNING, DeviceStatus.CRITICAL


class TestSystemStatus:
    def test_all_normal_no_alerts(self):
        assert system_status(3, [N, N, N], 0) == N

    def test_open_alert_alone_is_warning(self):
        assert system_status(3, [N, N, N], 1) == W

    def test_one_abnormal_is_warning(self):
        assert system_status(4, [W, N, N, N], 0) == W

    def test_half_abnormal_is_still_warning(self):
        assert system_status(4, [W, W, N, N], 2) == W

    def test_majority_abnormal_is_critical(self):
        assert system_status(3, [W, W, N], 2) == C

    def test_any_critical_device_is_critical(self):
        assert system_status(4, [C, N, N, N], 1) == C


class TestSummarize:
    def test_counts(self):
        last = datetime(2024, 6, 1, tzinfo=timezone.utc)
        ov = summarize(
            ["normal", "warning", "critical", "normal"],
            {AlarmType.LEAK: 2, "vibration": 1, AlarmType.POWER_LOSS: 1},
            last,
        )
        assert ov.total_devices == 4
        assert ov.abnormal_devices == 2
        assert ov.open_alerts == 4
        assert ov.leak_alerts == 2
        assert ov.vibration_alerts == 1
        assert ov.displacement_alerts == 0
        assert ov.cable_alerts == 0
        assert ov.power_alerts == 1
        assert ov.system_status == C
        assert ov.last_check_time == last

    def test_empty_fleet(self):
        ov = summarize([], {})
        assert ov.total_devices == 0
        assert ov.system_status == N
        assert ov.last_check_time is None

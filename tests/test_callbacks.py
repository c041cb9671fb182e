"""
tests/test_callbacks.py
────────────────────────
Tests for the dropdown helpers shared by the device and alarm pages.
"""
from config.devices import DEVICE_CODES
from src.callbacks.devices import device_options


class TestDeviceOptions:
    def test_lists_registered_devices(self, service):
        values = [o["value"] for o in device_options(service)]
        assert values == sorted(DEVICE_CODES)

    def test_includes_devices_registered_later(self, service):
        service.devices.register("CH-101", name="Tunnel spur", location="Shaft 9")
        options = device_options(service)
        assert {"label": "CH-101 · Tunnel spur", "value": "CH-101"} in options

    def test_all_option_first(self, service):
        options = device_options(service, include_all=True)
        assert options[0] == {"label": "All", "value": "all"}
        assert len(options) == len(DEVICE_CODES) + 1

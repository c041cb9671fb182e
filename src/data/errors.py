"""
src/data/errors.py
──────────────────
Error taxonomy for reading ingestion and alarm management.

  ValidationError       malformed reading or operator input; nothing is written
  ConfigError           threshold configuration missing or corrupt; nothing is written
  ConflictError         duplicate open alarm caught by the store's unique guard
  DeviceNotFoundError   unknown device code
"""


class MonitorError(Exception):
    """Base class for all domain errors."""


class ValidationError(MonitorError, ValueError):
    pass


class StatusTransitionError(ValidationError):
    """Raised when an alert status change goes backwards or leaves `resolved`."""


class ConfigError(MonitorError):
    pass


class ConflictError(MonitorError):
    pass


class DeviceNotFoundError(MonitorError, LookupError):
    def __init__(self, device_code: str):
        super().__init__(f"Device {device_code} does not exist")
        self.device_code = device_code

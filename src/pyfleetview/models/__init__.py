"""Data models for telemetry payloads and derived views."""

from pyfleetview.models._base import Coordinate, ensure_utc, safe_float
from pyfleetview.models.device import Device
from pyfleetview.models.position import Position
from pyfleetview.models.view import DeviceStatus, DeviceView

__all__ = [
    "Coordinate",
    "Device",
    "DeviceStatus",
    "DeviceView",
    "Position",
    "ensure_utc",
    "safe_float",
]

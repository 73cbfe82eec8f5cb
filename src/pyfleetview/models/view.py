"""Merged, UI-facing device view."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from pyfleetview.models._base import Coordinate
from pyfleetview.models.device import Device
from pyfleetview.models.position import Position


class DeviceStatus(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"


class DeviceView(BaseModel):
    """A device joined with its most recent position.

    Views are rebuilt wholesale on every poll and never mutated; use
    :meth:`with_address` to derive a copy carrying a resolved address.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    name: str
    status: DeviceStatus = DeviceStatus.OFFLINE
    latitude: float | None = None
    longitude: float | None = None
    speed: float = 0.0
    course: float = 0.0
    last_update: datetime | None = None
    address: str | None = None
    device: Device
    position: Position | None = None

    @property
    def coordinate(self) -> Coordinate | None:
        """``(latitude, longitude)`` or ``None`` when the device has no position."""
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)

    @property
    def is_online(self) -> bool:
        return self.status is DeviceStatus.ONLINE

    def with_address(self, address: str | None) -> DeviceView:
        return self.model_copy(update={"address": address})

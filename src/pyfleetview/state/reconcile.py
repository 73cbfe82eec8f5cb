"""Reconciliation of the device list with the latest positions.

This module contains no I/O. Given the same devices, positions and clock
reading, :func:`reconcile` always yields the same views.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import NamedTuple

from pyfleetview._constants import STALENESS_THRESHOLD
from pyfleetview.models.device import Device
from pyfleetview.models.position import Position
from pyfleetview.models.view import DeviceStatus, DeviceView


class ReconcileResult(NamedTuple):
    views: list[DeviceView]
    selected: DeviceView | None


def _utcnow() -> datetime:
    return datetime.now(UTC)


def is_online(device_time: datetime | None, now: datetime) -> bool:
    """Return True when a report at *device_time* is younger than the staleness threshold."""
    if device_time is None:
        return False
    return now - device_time < STALENESS_THRESHOLD


def _newer(candidate: Position, current: Position) -> bool:
    if candidate.device_time is None:
        return False
    if current.device_time is None:
        return True
    return candidate.device_time > current.device_time


def pick_position(positions: Iterable[Position]) -> dict[int, Position]:
    """Index positions by device id, one per device.

    When a poll carries several positions for the same device, the one with
    the latest ``device_time`` wins. A position without ``device_time``
    never replaces one that has it; remaining ties keep the first seen.
    """
    latest: dict[int, Position] = {}
    for position in positions:
        current = latest.get(position.device_id)
        if current is None or _newer(position, current):
            latest[position.device_id] = position
    return latest


def build_view(device: Device, position: Position | None, now: datetime) -> DeviceView:
    """Join one device with its position (or lack of one)."""
    if position is None:
        return DeviceView(
            id=device.id,
            name=device.name,
            status=DeviceStatus.OFFLINE,
            last_update=device.last_update,
            device=device,
        )

    online = is_online(position.device_time, now)
    return DeviceView(
        id=device.id,
        name=device.name,
        status=DeviceStatus.ONLINE if online else DeviceStatus.OFFLINE,
        latitude=position.latitude,
        longitude=position.longitude,
        speed=position.speed or 0.0,
        course=position.course or 0.0,
        last_update=position.device_time or device.last_update,
        device=device,
        position=position,
    )


def reconcile(
    devices: Sequence[Device],
    positions: Sequence[Position],
    previous_selected_id: int | None = None,
    *,
    now: datetime | None = None,
) -> ReconcileResult:
    """Merge one poll's devices and positions into device views.

    Parameters
    ----------
    devices : sequence of Device
        Device list from the poll. Output order follows this order.
    positions : sequence of Position
        Position list from the *same* poll.
    previous_selected_id : int or None
        Id of the currently selected device, if any.
    now : datetime or None
        Clock reading used for online classification. Defaults to the
        current UTC time.

    Returns
    -------
    ReconcileResult
        ``views`` holds exactly one view per device id (a duplicated id
        keeps its first occurrence); ``selected`` is the view matching
        *previous_selected_id*, or ``None`` if that device is gone.
    """
    if now is None:
        now = _utcnow()
    by_device = pick_position(positions)

    views: list[DeviceView] = []
    seen: set[int] = set()
    for device in devices:
        if device.id in seen:
            continue
        seen.add(device.id)
        views.append(build_view(device, by_device.get(device.id), now))

    selected: DeviceView | None = None
    if previous_selected_id is not None:
        selected = next((view for view in views if view.id == previous_selected_id), None)
    return ReconcileResult(views, selected)

"""Bounded movement trails per device."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, MutableMapping

from pyfleetview._constants import PATH_TRAIL_LIMIT
from pyfleetview.models._base import Coordinate
from pyfleetview.models.view import DeviceView

Trail = deque[Coordinate]


def append_point(
    trails: MutableMapping[int, Trail],
    device_id: int,
    point: Coordinate,
    *,
    limit: int = PATH_TRAIL_LIMIT,
) -> tuple[Coordinate, ...]:
    """Append *point* to the trail of *device_id*, creating the trail if needed.

    The point is skipped when it equals the trail's last point exactly, so a
    stationary device does not grow its trail. Once the trail holds more than
    *limit* points the oldest ones are dropped, whether or not the deque was
    created with a ``maxlen``.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")
    trail = trails.get(device_id)
    if trail is None:
        trail = deque(maxlen=limit)
        trails[device_id] = trail
    if not trail or trail[-1] != point:
        trail.append(point)
    while len(trail) > limit:
        trail.popleft()
    return tuple(trail)


class PathTracker:
    """Per-device trails of up to ``limit`` distinct points, oldest first.

    Trails are created on the first sighting of a device with coordinates and
    live as long as the tracker. They are fed from reconciled views, never
    from raw positions, so a device missing from a poll keeps its trail.
    """

    def __init__(self, *, limit: int = PATH_TRAIL_LIMIT) -> None:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self._limit = limit
        self._trails: dict[int, Trail] = {}

    @property
    def limit(self) -> int:
        return self._limit

    def append_point(self, device_id: int, point: Coordinate) -> tuple[Coordinate, ...]:
        return append_point(self._trails, device_id, point, limit=self._limit)

    def update(self, views: Iterable[DeviceView]) -> None:
        """Record the current coordinate of every view that has one."""
        for view in views:
            coordinate = view.coordinate
            if coordinate is not None:
                self.append_point(view.id, coordinate)

    def get_trail(self, device_id: int) -> tuple[Coordinate, ...]:
        trail = self._trails.get(device_id)
        return tuple(trail) if trail is not None else ()

    def trails(self) -> dict[int, tuple[Coordinate, ...]]:
        return {device_id: tuple(trail) for device_id, trail in self._trails.items()}

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._trails

    def __len__(self) -> int:
        return len(self._trails)

"""Search filtering and selection tracking over reconciled views."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pyfleetview.models.view import DeviceView

#: ``(south, west, north, east)`` in degrees.
Bounds = tuple[float, float, float, float]


def filter_by_name(views: Sequence[DeviceView], term: str) -> list[DeviceView]:
    """Return views whose name contains *term*, ignoring case.

    A blank term returns every view in its original order. Otherwise the term
    is matched as typed, surrounding whitespace included.
    """
    if not term.strip():
        return list(views)
    needle = term.casefold()
    return [view for view in views if needle in view.name.casefold()]


def resolve_selection(views: Iterable[DeviceView], selected_id: int | None) -> DeviceView | None:
    """Return the view whose id is *selected_id*, or ``None``."""
    if selected_id is None:
        return None
    return next((view for view in views if view.id == selected_id), None)


def refresh_selection(
    views: Sequence[DeviceView],
    selected_id: int | None,
    previous: DeviceView | None,
) -> DeviceView | None:
    """Re-resolve the held selection against freshly reconciled views.

    - nothing selected: stays ``None``
    - id still present: the fresh view, keeping the previous address when
      the coordinates did not change
    - id vanished: the previous view is kept, a poll never clears a
      selection on its own
    """
    if selected_id is None:
        return None
    current = resolve_selection(views, selected_id)
    if current is None:
        if previous is not None and previous.id == selected_id:
            return previous
        return None
    if previous is not None and previous.id == current.id and previous.address is not None:
        if previous.coordinate is not None and previous.coordinate == current.coordinate:
            return current.with_address(previous.address)
    return current


def compute_bounds(views: Iterable[DeviceView]) -> Bounds | None:
    """Bounding box of every view with coordinates, or ``None`` if there are none."""
    coordinates = [view.coordinate for view in views if view.coordinate is not None]
    if not coordinates:
        return None
    latitudes = [lat for lat, _ in coordinates]
    longitudes = [lon for _, lon in coordinates]
    return (min(latitudes), min(longitudes), max(latitudes), max(longitudes))

"""Immutable application state and its pure transitions.

Every transition takes an :class:`AppState` and returns a new one; nothing
here performs I/O or keeps module-level state, so the tracker's behaviour can
be reproduced step by step in tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from pyfleetview._constants import GEOCODE_FAILED_ADDRESS
from pyfleetview.models._base import Coordinate
from pyfleetview.models.device import Device
from pyfleetview.models.position import Position
from pyfleetview.models.view import DeviceView
from pyfleetview.state.reconcile import reconcile
from pyfleetview.state.selection import filter_by_name, refresh_selection, resolve_selection


class AppState(BaseModel):
    """Snapshot of everything a presentation layer needs to render."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    views: list[DeviceView] = Field(default_factory=list)
    filtered: list[DeviceView] = Field(default_factory=list)
    search_term: str = ""
    selected_id: int | None = None
    selected: DeviceView | None = None
    error: str | None = None
    loading: bool = True
    refreshing: bool = False
    last_refresh: datetime | None = None
    generation: int = 0


def begin_refresh(state: AppState, generation: int) -> AppState:
    return state.model_copy(update={"refreshing": True, "generation": generation})


def apply_poll(
    state: AppState,
    devices: Sequence[Device],
    positions: Sequence[Position],
    *,
    now: datetime | None = None,
) -> AppState:
    """Reconcile one poll and recompute the filtered list and the selection."""
    if now is None:
        now = datetime.now(UTC)
    views = reconcile(devices, positions, now=now).views
    selected = refresh_selection(views, state.selected_id, state.selected)
    return state.model_copy(
        update={
            "views": views,
            "filtered": filter_by_name(views, state.search_term),
            "selected": selected,
            "error": None,
            "loading": False,
            "refreshing": False,
            "last_refresh": now,
        }
    )


def apply_poll_error(state: AppState, message: str) -> AppState:
    """Record a failed poll; already displayed views stay in place."""
    return state.model_copy(update={"error": message, "loading": False, "refreshing": False})


def set_search_term(state: AppState, term: str) -> AppState:
    return state.model_copy(update={"search_term": term, "filtered": filter_by_name(state.views, term)})


def select(state: AppState, device_id: int) -> AppState:
    """Select *device_id*.

    A resolved address of the same device and coordinate is kept. A failed
    lookup is not, so selecting the device again asks for the address anew.

    Raises
    ------
    KeyError
        If no current view has that id.
    """
    view = resolve_selection(state.views, device_id)
    if view is None:
        raise KeyError(device_id)
    previous = state.selected
    if (
        previous is not None
        and previous.id == device_id
        and previous.address not in (None, GEOCODE_FAILED_ADDRESS)
        and previous.coordinate == view.coordinate
    ):
        view = view.with_address(previous.address)
    return state.model_copy(update={"selected_id": device_id, "selected": view})


def clear_selection(state: AppState) -> AppState:
    return state.model_copy(update={"selected_id": None, "selected": None})


def attach_address(state: AppState, device_id: int, coordinate: Coordinate, address: str) -> AppState:
    """Attach *address* to the selection if it still points at the same device and coordinate.

    Results of a lookup that finished after the user moved on, or after the
    device reported a new position, are dropped.
    """
    selected = state.selected
    if selected is None or selected.id != device_id or selected.coordinate != coordinate:
        return state
    return state.model_copy(update={"selected": selected.with_address(address)})

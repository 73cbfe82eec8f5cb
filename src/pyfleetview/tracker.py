"""Live device tracker driving polling, reconciliation, trails and geocoding."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pyfleetview._constants import FETCH_ERROR_MESSAGE, PATH_TRAIL_LIMIT, POLL_INTERVAL
from pyfleetview.client import TelemetryClient
from pyfleetview.models._base import Coordinate
from pyfleetview.models.view import DeviceView
from pyfleetview.state import app_state as _app_state
from pyfleetview.state.app_state import AppState
from pyfleetview.state.geocode import GeocodeCache
from pyfleetview.state.trails import PathTracker

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FleetTracker:
    """Keeps an :class:`AppState` in sync with the telemetry server.

    A poll fetches devices and positions back to back, reconciles them, then
    feeds the resulting views to the path tracker. Each poll is tagged with a
    generation number when it starts; a poll whose generation is no longer
    the latest when it completes is discarded, so a slow poll can never
    overwrite the result of a newer one.

    Usage::

        async with FleetClient(config) as client:
            async with FleetTracker(client, poll_interval=config.poll_interval) as tracker:
                tracker.select(42)
                ...
    """

    def __init__(
        self,
        client: TelemetryClient,
        *,
        poll_interval: float = POLL_INTERVAL,
        trail_limit: int = PATH_TRAIL_LIMIT,
        clock: Callable[[], datetime] = _utcnow,
        on_update: Callable[[AppState], None] | None = None,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        self._client = client
        self._poll_interval = poll_interval
        self._clock = clock
        self._on_update = on_update
        self._state = AppState()
        self._trails = PathTracker(limit=trail_limit)
        self._geocode = GeocodeCache()
        self._generation = 0
        self._poll_task: asyncio.Task[None] | None = None
        self._address_tasks: set[asyncio.Task[str]] = set()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetTracker:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    def start(self) -> None:
        """Start polling now and then every ``poll_interval`` seconds."""
        if self.is_running:
            return
        self._poll_task = asyncio.create_task(self._poll_loop(), name="pyfleetview-poll")
        _logger.info("Tracker started (interval=%ss)", self._poll_interval)

    async def stop(self) -> None:
        """Cancel the poll timer and any pending address lookups."""
        task = self._poll_task
        self._poll_task = None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            _logger.info("Tracker stopped")

        address_tasks = list(self._address_tasks)
        for address_task in address_tasks:
            address_task.cancel()
        if address_tasks:
            await asyncio.gather(*address_tasks, return_exceptions=True)
        await self._geocode.aclose()

    @property
    def is_running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def _poll_loop(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self._poll_interval)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def generation(self) -> int:
        """Generation of the most recently initiated poll."""
        return self._generation

    @property
    def trails(self) -> PathTracker:
        return self._trails

    @property
    def geocode_cache(self) -> GeocodeCache:
        return self._geocode

    def get_trail(self, device_id: int) -> tuple[Coordinate, ...]:
        return self._trails.get_trail(device_id)

    def _set_state(self, state: AppState) -> None:
        self._state = state
        if self._on_update is not None:
            try:
                self._on_update(state)
            except Exception:
                _logger.debug("on_update callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Run one poll cycle.

        Also serves as the retry action after a failed poll. Returns
        ``True`` when the result was applied, ``False`` when the poll failed
        or was superseded by a newer one.
        """
        self._generation += 1
        generation = self._generation
        self._set_state(_app_state.begin_refresh(self._state, generation))

        try:
            devices = await self._client.fetch_devices()
            positions = await self._client.fetch_positions()
        except Exception as exc:  # noqa: BLE001
            if generation != self._generation:
                _logger.debug("Ignoring failure of superseded poll %d: %s", generation, exc)
                return False
            _logger.warning("Error fetching data: %s", exc)
            self._set_state(_app_state.apply_poll_error(self._state, FETCH_ERROR_MESSAGE))
            return False

        if generation != self._generation:
            _logger.debug("Discarding result of poll %d, poll %d is newer", generation, self._generation)
            return False

        state = _app_state.apply_poll(self._state, devices, positions, now=self._clock())
        self._trails.update(state.views)
        self._set_state(state)
        _logger.debug(
            "Poll %d applied: %d devices, %d positions, %d online",
            generation,
            len(devices),
            len(positions),
            sum(1 for view in state.views if view.is_online),
        )
        self._schedule_address_lookup()
        return True

    # ------------------------------------------------------------------
    # Selection & search
    # ------------------------------------------------------------------

    def set_search_term(self, term: str) -> list[DeviceView]:
        self._set_state(_app_state.set_search_term(self._state, term))
        return self._state.filtered

    def select(self, device_id: int) -> DeviceView:
        """Select a device and start resolving its address in the background.

        Must be called from within the running event loop.

        Raises
        ------
        KeyError
            If the device is not part of the current views.
        """
        self._set_state(_app_state.select(self._state, device_id))
        self._schedule_address_lookup()
        selected = self._state.selected
        assert selected is not None  # noqa: S101
        return selected

    def clear_selection(self) -> None:
        self._set_state(_app_state.clear_selection(self._state))

    # ------------------------------------------------------------------
    # Address resolution
    # ------------------------------------------------------------------

    def _schedule_address_lookup(self) -> None:
        selected = self._state.selected
        if selected is None or selected.address is not None:
            return
        coordinate = selected.coordinate
        if coordinate is None:
            return

        cached = self._geocode.get(*coordinate)
        if cached is not None:
            self._set_state(_app_state.attach_address(self._state, selected.id, coordinate, cached))
            return

        task = asyncio.create_task(self._resolve_address(selected.id, coordinate))
        self._address_tasks.add(task)
        task.add_done_callback(self._address_tasks.discard)

    async def _resolve_address(self, device_id: int, coordinate: Coordinate) -> str:
        latitude, longitude = coordinate
        address = await self._geocode.resolve_address(latitude, longitude, self._client.reverse_geocode)
        self._set_state(_app_state.attach_address(self._state, device_id, coordinate, address))
        return address

    async def resolve_selected_address(self) -> str | None:
        """Resolve (or reuse) the address of the current selection and attach it.

        Returns ``None`` when nothing is selected or the selection has no
        coordinates. Shares any lookup already in flight for the same point.
        """
        selected = self._state.selected
        if selected is None:
            return None
        coordinate = selected.coordinate
        if coordinate is None:
            return None
        return await self._resolve_address(selected.id, coordinate)

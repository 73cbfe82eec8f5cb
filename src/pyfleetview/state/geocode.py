"""Memoized reverse geocoding keyed by exact coordinate pairs.

Lookups for the same pair are coalesced: while one is in flight, every other
request for that pair awaits the same task instead of issuing a second
network call. Successful results are cached forever; failures are not
cached and resolve to :data:`GEOCODE_FAILED_ADDRESS`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from pyfleetview._constants import GEOCODE_FAILED_ADDRESS
from pyfleetview.models._base import Coordinate

_logger = logging.getLogger(__name__)

Lookup = Callable[[float, float], Awaitable[str]]


class GeocodeCache:
    """Address cache with in-flight request coalescing.

    The cache is unbounded; entries are only added for coordinates that were
    selected at least once.
    """

    def __init__(self) -> None:
        self._addresses: dict[Coordinate, str] = {}
        self._pending: dict[Coordinate, asyncio.Task[str]] = {}

    def get(self, latitude: float, longitude: float) -> str | None:
        return self._addresses.get((latitude, longitude))

    def __contains__(self, key: object) -> bool:
        return key in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)

    @property
    def in_flight(self) -> int:
        return len(self._pending)

    async def resolve_address(self, latitude: float, longitude: float, lookup: Lookup) -> str:
        """Return the address for ``(latitude, longitude)``.

        Cache hits return without calling *lookup*. A miss calls
        ``lookup(latitude, longitude)`` once, even if several callers ask
        for the same pair concurrently.
        """
        key = (latitude, longitude)
        cached = self._addresses.get(key)
        if cached is not None:
            return cached

        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._lookup(key, lookup))
            self._pending[key] = task
        else:
            _logger.debug("Joining in-flight address lookup for %s", key)
        # A cancelled caller must not cancel the lookup other callers share.
        return await asyncio.shield(task)

    async def _lookup(self, key: Coordinate, lookup: Lookup) -> str:
        latitude, longitude = key
        try:
            address = await lookup(latitude, longitude)
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Failed to fetch address for (%s, %s): %s", latitude, longitude, exc)
            return GEOCODE_FAILED_ADDRESS
        else:
            self._addresses[key] = address
            return address
        finally:
            self._pending.pop(key, None)

    async def aclose(self) -> None:
        """Cancel lookups still in flight."""
        pending = list(self._pending.values())
        self._pending.clear()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def clear(self) -> None:
        self._addresses.clear()


async def resolve_address(cache: GeocodeCache, latitude: float, longitude: float, lookup: Lookup) -> str:
    """Functional form of :meth:`GeocodeCache.resolve_address`."""
    return await cache.resolve_address(latitude, longitude, lookup)

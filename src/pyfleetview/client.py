"""High-level async client for the telemetry server and reverse geocoder."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from pyfleetview._constants import DEVICES_ENDPOINT, POSITIONS_ENDPOINT, UNKNOWN_LOCATION
from pyfleetview._transport import HttpTransport, Transport
from pyfleetview.config import FleetConfig
from pyfleetview.exceptions import FleetApiError, FleetError, FleetGeocodeError
from pyfleetview.models.device import Device
from pyfleetview.models.position import Position

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class TelemetryClient(Protocol):
    """The three operations the tracker consumes.

    Any object with these coroutines can drive :class:`pyfleetview.tracker.FleetTracker`.
    """

    async def fetch_devices(self) -> list[Device]:
        ...

    async def fetch_positions(self) -> list[Position]:
        ...

    async def reverse_geocode(self, latitude: float, longitude: float) -> str:
        ...


def _parse_list(payload: Any, model: type[M], *, endpoint: str) -> list[M]:
    """Validate every entry of a list payload, skipping malformed entries."""
    if not isinstance(payload, list):
        raise FleetApiError(
            f"{endpoint} returned {type(payload).__name__}, expected a list",
            endpoint=endpoint,
        )
    parsed: list[M] = []
    for index, entry in enumerate(payload):
        try:
            parsed.append(model.model_validate(entry))
        except ValidationError as exc:
            _logger.warning(
                "Skipping malformed %s entry #%d from %s: %s",
                model.__name__,
                index,
                endpoint,
                exc.errors(include_url=False),
            )
    return parsed


class FleetClient:
    """Async client for a Traccar-compatible telemetry server.

    Usage::

        async with FleetClient(config) as client:
            devices = await client.fetch_devices()
            positions = await client.fetch_positions()
    """

    def __init__(
        self,
        config: FleetConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport_factory: Callable[[FleetConfig, aiohttp.ClientSession], Transport] = HttpTransport,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport_factory = transport_factory
        self._transport: Transport | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetClient:
        self._config.validate()
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = self._transport_factory(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    @property
    def config(self) -> FleetConfig:
        return self._config

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise FleetError("Client not initialized. Use 'async with FleetClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------

    async def fetch_devices(self) -> list[Device]:
        """Fetch every device visible to the account.

        Raises
        ------
        FleetTransportError
            On network failure, non-2xx status, or invalid JSON.
        FleetApiError
            When the body is not a list.
        """
        transport = self._require_transport()
        url = f"{self._config.base_url}{DEVICES_ENDPOINT}"
        try:
            payload = await transport.get_json(url)
        except FleetError:
            _logger.error("Error fetching devices", exc_info=True)
            raise
        devices = _parse_list(payload, Device, endpoint=DEVICES_ENDPOINT)
        _logger.debug("Fetched %d devices", len(devices))
        return devices

    async def fetch_positions(self) -> list[Position]:
        """Fetch the latest position of every device.

        Raises
        ------
        FleetTransportError
            On network failure, non-2xx status, or invalid JSON.
        FleetApiError
            When the body is not a list.
        """
        transport = self._require_transport()
        url = f"{self._config.base_url}{POSITIONS_ENDPOINT}"
        try:
            payload = await transport.get_json(url)
        except FleetError:
            _logger.error("Error fetching positions", exc_info=True)
            raise
        positions = _parse_list(payload, Position, endpoint=POSITIONS_ENDPOINT)
        _logger.debug("Fetched %d positions", len(positions))
        return positions

    # ------------------------------------------------------------------
    # Reverse geocoding
    # ------------------------------------------------------------------

    async def reverse_geocode(self, latitude: float, longitude: float) -> str:
        """Resolve a coordinate pair to a human-readable address.

        Uses the public Nominatim API without credentials. Returns
        ``"Unknown location"`` when the geocoder has no ``display_name``
        for the point.

        Raises
        ------
        FleetGeocodeError
            When the lookup itself fails.
        """
        transport = self._require_transport()
        params = {
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "zoom": self._config.geocode_zoom,
            "addressdetails": 1,
        }
        try:
            payload = await transport.get_json(self._config.geocode_url, params=params, authenticated=False)
        except FleetError as exc:
            raise FleetGeocodeError(f"Reverse geocoding ({latitude}, {longitude}) failed: {exc}") from exc

        if isinstance(payload, dict) and payload.get("display_name"):
            return str(payload["display_name"])
        return UNKNOWN_LOCATION

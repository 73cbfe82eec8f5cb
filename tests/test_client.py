from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest

from pyfleetview._transport import HttpTransport, _error_message
from pyfleetview.client import FleetClient
from pyfleetview.config import FleetConfig
from pyfleetview.exceptions import (
    FleetApiError,
    FleetAuthenticationError,
    FleetError,
    FleetGeocodeError,
    FleetTransportError,
)


@dataclass
class FakeTransport:
    responses: dict[str, Any] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, Any], bool]] = field(default_factory=list)

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        self.calls.append((url, dict(params or {}), authenticated))
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def config() -> FleetConfig:
    return FleetConfig(base_url="https://traccar.example.com/api", email="user@example.com", password="secret")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


def _client(config: FleetConfig, transport: FakeTransport) -> FleetClient:
    def factory(_config: FleetConfig, _session: aiohttp.ClientSession) -> FakeTransport:
        return transport

    return FleetClient(config, transport_factory=factory)


@pytest.mark.asyncio
async def test_fetch_devices_and_positions(config: FleetConfig, transport: FakeTransport) -> None:
    transport.responses = {
        "https://traccar.example.com/api/devices": [{"id": 1, "name": "Truck A"}],
        "https://traccar.example.com/api/positions": [
            {"deviceId": 1, "latitude": 9.0, "longitude": 40.0, "deviceTime": "2026-01-01T10:00:00Z"},
        ],
    }

    async with _client(config, transport) as client:
        devices = await client.fetch_devices()
        positions = await client.fetch_positions()

    assert [d.name for d in devices] == ["Truck A"]
    assert positions[0].coordinate == (9.0, 40.0)
    assert all(authenticated for _, _, authenticated in transport.calls)


@pytest.mark.asyncio
async def test_malformed_entries_are_skipped(config: FleetConfig, transport: FakeTransport) -> None:
    transport.responses = {
        "https://traccar.example.com/api/positions": [
            {"deviceId": 1, "latitude": 9.0, "longitude": 40.0},
            {"deviceId": 2},
        ],
    }

    async with _client(config, transport) as client:
        positions = await client.fetch_positions()

    assert [p.device_id for p in positions] == [1]


@pytest.mark.asyncio
async def test_device_with_null_name_is_kept(config: FleetConfig, transport: FakeTransport) -> None:
    transport.responses = {
        "https://traccar.example.com/api/devices": [{"id": 1, "name": None}, {"id": 2, "name": "Truck B"}],
    }

    async with _client(config, transport) as client:
        devices = await client.fetch_devices()

    assert [(d.id, d.name) for d in devices] == [(1, ""), (2, "Truck B")]


@pytest.mark.asyncio
async def test_non_list_body_raises_api_error(config: FleetConfig, transport: FakeTransport) -> None:
    transport.responses = {"https://traccar.example.com/api/devices": {"message": "nope"}}

    async with _client(config, transport) as client:
        with pytest.raises(FleetApiError, match="/devices"):
            await client.fetch_devices()


@pytest.mark.asyncio
async def test_transport_failure_propagates(config: FleetConfig, transport: FakeTransport) -> None:
    transport.responses = {
        "https://traccar.example.com/api/positions": FleetTransportError("HTTP 500", status_code=500),
    }

    async with _client(config, transport) as client:
        with pytest.raises(FleetTransportError):
            await client.fetch_positions()


@pytest.mark.asyncio
async def test_reverse_geocode_uses_nominatim_without_credentials(config: FleetConfig, transport: FakeTransport) -> None:
    transport.responses = {config.geocode_url: {"display_name": "Addis Ababa, Ethiopia"}}

    async with _client(config, transport) as client:
        address = await client.reverse_geocode(9.0, 40.0)

    assert address == "Addis Ababa, Ethiopia"
    url, params, authenticated = transport.calls[0]
    assert url == "https://nominatim.openstreetmap.org/reverse"
    assert params == {"format": "json", "lat": 9.0, "lon": 40.0, "zoom": 18, "addressdetails": 1}
    assert authenticated is False


@pytest.mark.asyncio
async def test_reverse_geocode_without_display_name(config: FleetConfig, transport: FakeTransport) -> None:
    transport.responses = {config.geocode_url: {"error": "Unable to geocode"}}

    async with _client(config, transport) as client:
        assert await client.reverse_geocode(0.0, 0.0) == "Unknown location"


@pytest.mark.asyncio
async def test_reverse_geocode_failure_raises_geocode_error(config: FleetConfig, transport: FakeTransport) -> None:
    transport.responses = {config.geocode_url: FleetTransportError("timeout")}

    async with _client(config, transport) as client:
        with pytest.raises(FleetGeocodeError):
            await client.reverse_geocode(9.0, 40.0)


@pytest.mark.asyncio
async def test_client_requires_context_manager(config: FleetConfig) -> None:
    client = FleetClient(config)

    with pytest.raises(FleetError, match="not initialized"):
        await client.fetch_devices()


def test_error_message_prefers_server_message() -> None:
    assert _error_message('{"message": "Account is disabled"}') == "Account is disabled"
    assert _error_message("<html>502</html>") == "<html>502</html>"


@dataclass
class FakeResponse:
    status: int
    body: bytes

    async def text(self) -> str:
        return self.body.decode("utf-8")

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None


@dataclass
class FakeSession:
    response: FakeResponse

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.response


@pytest.mark.asyncio
async def test_http_transport_decodes_json(config: FleetConfig) -> None:
    session = FakeSession(FakeResponse(200, b'[{"id": 1}]'))
    transport = HttpTransport(config, session)  # type: ignore[arg-type]

    assert await transport.get_json("https://traccar.example.com/api/devices") == [{"id": 1}]


@pytest.mark.asyncio
async def test_http_transport_wraps_undecodable_body(config: FleetConfig) -> None:
    session = FakeSession(FakeResponse(200, b"\xff\xfe\xfa"))
    transport = HttpTransport(config, session)  # type: ignore[arg-type]

    with pytest.raises(FleetTransportError, match="Undecodable"):
        await transport.get_json("https://traccar.example.com/api/devices")


@pytest.mark.asyncio
async def test_http_transport_maps_unauthorized(config: FleetConfig) -> None:
    session = FakeSession(FakeResponse(401, b'{"message": "Unauthorized"}'))
    transport = HttpTransport(config, session)  # type: ignore[arg-type]

    with pytest.raises(FleetAuthenticationError, match="Unauthorized") as exc_info:
        await transport.get_json("https://traccar.example.com/api/devices")
    assert exc_info.value.status_code == 401

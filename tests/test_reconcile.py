from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pyfleetview._constants import STALENESS_THRESHOLD
from pyfleetview.models import Device, DeviceStatus, Position
from pyfleetview.state.reconcile import is_online, pick_position, reconcile

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _device(device_id: int = 1, name: str = "Truck A", **extra: object) -> Device:
    return Device.model_validate({"id": device_id, "name": name, **extra})


def _position(device_id: int = 1, *, lat: float = 9.0, lon: float = 40.0, age: timedelta | None = None, **extra: object) -> Position:
    payload: dict[str, object] = {"deviceId": device_id, "latitude": lat, "longitude": lon, **extra}
    if age is not None:
        payload["deviceTime"] = (NOW - age).isoformat()
    return Position.model_validate(payload)


def test_recent_position_is_online_with_coordinates() -> None:
    views, selected = reconcile([_device()], [_position(age=timedelta(seconds=60))], now=NOW)

    assert selected is None
    assert len(views) == 1
    view = views[0]
    assert view.id == 1
    assert view.status == DeviceStatus.ONLINE
    assert view.latitude == 9.0
    assert view.longitude == 40.0
    assert view.last_update == NOW - timedelta(seconds=60)


def test_stale_position_is_offline() -> None:
    views, _ = reconcile([_device()], [_position(age=timedelta(seconds=600))], now=NOW)

    assert views[0].status == DeviceStatus.OFFLINE
    assert views[0].coordinate == (9.0, 40.0)


def test_threshold_is_exclusive() -> None:
    assert STALENESS_THRESHOLD == timedelta(minutes=5)
    assert is_online(NOW - timedelta(seconds=299), NOW) is True
    assert is_online(NOW - timedelta(seconds=300), NOW) is False
    assert is_online(None, NOW) is False


def test_device_without_position_is_offline_without_coordinates() -> None:
    device = _device(lastUpdate="2025-12-31T08:00:00Z")
    views, _ = reconcile([device], [_position(device_id=2, age=timedelta(seconds=10))], now=NOW)

    view = views[0]
    assert view.status == DeviceStatus.OFFLINE
    assert view.latitude is None
    assert view.longitude is None
    assert view.coordinate is None
    assert view.speed == 0
    assert view.course == 0
    assert view.position is None
    assert view.last_update == datetime(2025, 12, 31, 8, 0, tzinfo=UTC)


def test_device_without_position_or_timestamp_has_no_last_update() -> None:
    views, _ = reconcile([_device()], [], now=NOW)

    assert views[0].last_update is None


def test_missing_speed_and_course_default_to_zero() -> None:
    views, _ = reconcile([_device()], [_position(age=timedelta(seconds=5))], now=NOW)

    assert views[0].speed == 0
    assert views[0].course == 0


def test_speed_and_course_are_copied_from_position() -> None:
    views, _ = reconcile([_device()], [_position(age=timedelta(seconds=5), speed=12.5, course=270)], now=NOW)

    assert views[0].speed == 12.5
    assert views[0].course == 270


def test_position_without_device_time_falls_back_to_device_last_update() -> None:
    device = _device(lastUpdate="2025-12-31T08:00:00Z")
    views, _ = reconcile([device], [_position()], now=NOW)

    assert views[0].status == DeviceStatus.OFFLINE
    assert views[0].last_update == datetime(2025, 12, 31, 8, 0, tzinfo=UTC)


def test_one_view_per_device_in_device_order() -> None:
    devices = [_device(3, "C"), _device(1, "A"), _device(2, "B"), _device(1, "A duplicate")]
    positions = [_position(2, age=timedelta(seconds=1)), _position(3, age=timedelta(seconds=1))]

    views, _ = reconcile(devices, positions, now=NOW)

    assert [view.id for view in views] == [3, 1, 2]
    assert views[1].name == "A"


def test_latest_device_time_wins_among_duplicate_positions() -> None:
    older = _position(lat=1.0, lon=1.0, age=timedelta(seconds=120))
    newer = _position(lat=2.0, lon=2.0, age=timedelta(seconds=30))
    undated = _position(lat=3.0, lon=3.0)

    assert pick_position([older, newer, undated])[1] is newer
    assert pick_position([undated, older])[1] is older

    views, _ = reconcile([_device()], [newer, older], now=NOW)
    assert views[0].coordinate == (2.0, 2.0)


def test_equal_timestamps_keep_first_position() -> None:
    first = _position(lat=1.0, lon=1.0, age=timedelta(seconds=30))
    second = _position(lat=2.0, lon=2.0, age=timedelta(seconds=30))

    assert pick_position([first, second])[1] is first


def test_previous_selection_is_resolved_against_new_views() -> None:
    devices = [_device(1, "Truck A"), _device(2, "Truck B")]
    positions = [_position(2, lat=5.0, lon=6.0, age=timedelta(seconds=10))]

    views, selected = reconcile(devices, positions, previous_selected_id=2, now=NOW)

    assert selected is views[1]
    assert selected.coordinate == (5.0, 6.0)


def test_previous_selection_missing_yields_none() -> None:
    _, selected = reconcile([_device(1)], [], previous_selected_id=99, now=NOW)

    assert selected is None


def test_reconcile_is_repeatable() -> None:
    devices = [_device(1), _device(2, "Van")]
    positions = [_position(1, age=timedelta(seconds=10), speed=3.0)]

    first, _ = reconcile(devices, positions, now=NOW)
    second, _ = reconcile(devices, positions, now=NOW)

    assert first == second


def test_device_metadata_is_passed_through() -> None:
    device = _device(uniqueId="356938035643809", phone="+251900000000", attributes={"color": "red"})
    views, _ = reconcile([device], [], now=NOW)

    passed = views[0].device
    assert passed.unique_id == "356938035643809"
    assert passed.phone == "+251900000000"  # type: ignore[attr-defined]
    assert passed.raw["attributes"] == {"color": "red"}

"""pyfleetview - Live device positions mirrored from a Traccar-compatible server."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfleetview")
except PackageNotFoundError:
    __version__ = "0+local"

from pyfleetview.client import FleetClient, TelemetryClient
from pyfleetview.config import FleetConfig
from pyfleetview.exceptions import (
    FleetApiError,
    FleetAuthenticationError,
    FleetConfigError,
    FleetError,
    FleetGeocodeError,
    FleetTransportError,
)
from pyfleetview.models import Coordinate, Device, DeviceStatus, DeviceView, Position
from pyfleetview.state.app_state import AppState
from pyfleetview.state.geocode import GeocodeCache, resolve_address
from pyfleetview.state.reconcile import ReconcileResult, reconcile
from pyfleetview.state.selection import filter_by_name, resolve_selection
from pyfleetview.state.trails import PathTracker, append_point
from pyfleetview.tracker import FleetTracker

__all__ = [
    "__version__",
    "AppState",
    "Coordinate",
    "Device",
    "DeviceStatus",
    "DeviceView",
    "FleetApiError",
    "FleetAuthenticationError",
    "FleetClient",
    "FleetConfig",
    "FleetConfigError",
    "FleetError",
    "FleetGeocodeError",
    "FleetTracker",
    "FleetTransportError",
    "GeocodeCache",
    "PathTracker",
    "Position",
    "ReconcileResult",
    "TelemetryClient",
    "append_point",
    "filter_by_name",
    "reconcile",
    "resolve_address",
    "resolve_selection",
]

"""Custom exception hierarchy for pyfleetview."""

from __future__ import annotations


class FleetError(Exception):
    """Base exception for all pyfleetview errors."""


class FleetConfigError(FleetError):
    """Invalid or missing configuration."""


class FleetTransportError(FleetError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FleetAuthenticationError(FleetTransportError):
    """Server rejected the configured credentials (HTTP 401/403)."""


class FleetApiError(FleetError):
    """Server answered, but the body does not have the expected shape."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class FleetGeocodeError(FleetError):
    """Reverse geocoding lookup failed.

    The geocode cache turns this into a placeholder address; it never
    reaches the reconciliation path.
    """

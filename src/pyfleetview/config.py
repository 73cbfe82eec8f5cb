"""Client configuration for pyfleetview."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyfleetview._constants import GEOCODE_URL, GEOCODE_ZOOM, POLL_INTERVAL, REQUEST_TIMEOUT, USER_AGENT
from pyfleetview.exceptions import FleetConfigError


@dataclasses.dataclass(frozen=True)
class FleetConfig:
    """Client and tracker configuration.

    Parameters
    ----------
    base_url : str
        Telemetry server API root (e.g. ``"https://demo.traccar.org/api"``).
    email : str
        Account email used for HTTP Basic authentication.
    password : str
        Account password used for HTTP Basic authentication.
    poll_interval : float
        Seconds between two scheduled polls of devices and positions.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    geocode_url : str
        Reverse geocoding endpoint (Nominatim compatible).
    geocode_zoom : int
        Nominatim ``zoom`` level; ``18`` resolves down to building level.
    user_agent : str
        ``User-Agent`` header. Nominatim rejects requests without one.
    """

    base_url: str
    email: str
    password: str
    poll_interval: float = POLL_INTERVAL
    request_timeout: float = REQUEST_TIMEOUT
    geocode_url: str = GEOCODE_URL
    geocode_zoom: int = GEOCODE_ZOOM
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))

    def validate(self) -> None:
        """Raise :class:`FleetConfigError` if the configuration is unusable."""
        if not self.base_url:
            raise FleetConfigError("base_url is required")
        if not self.email or not self.password:
            raise FleetConfigError("email and password are required")
        if self.poll_interval <= 0:
            raise FleetConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout <= 0:
            raise FleetConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetConfig:
        """Create configuration from environment variables.

        Reads ``TRACCAR_BASE_URL``, ``TRACCAR_EMAIL``, ``TRACCAR_PASSWORD``
        and the optional ``TRACCAR_*`` tuning variables. Explicit keyword
        arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "TRACCAR_BASE_URL": "base_url",
            "TRACCAR_EMAIL": "email",
            "TRACCAR_PASSWORD": "password",
            "TRACCAR_GEOCODE_URL": "geocode_url",
            "TRACCAR_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {"base_url": "", "email": "", "password": ""}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # numeric values, handle separately
        interval_env = env.get("TRACCAR_POLL_INTERVAL")
        if interval_env is not None and "poll_interval" not in overrides:
            config_kwargs["poll_interval"] = float(interval_env)

        timeout_env = env.get("TRACCAR_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

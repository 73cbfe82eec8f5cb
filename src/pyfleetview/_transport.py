"""HTTP transport for the telemetry server and the reverse geocoder."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyfleetview._constants import CONTENT_TYPE
from pyfleetview._redact import redact_for_log
from pyfleetview.config import FleetConfig
from pyfleetview.exceptions import FleetAuthenticationError, FleetTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by :class:`pyfleetview.client.FleetClient`.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        ...


def _error_message(text: str) -> str:
    """Extract a server-provided ``message`` from an error body, if any."""
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return text[:200]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return text[:200]


class HttpTransport:
    """aiohttp transport that adds Basic authentication to telemetry requests."""

    def __init__(self, config: FleetConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._auth = aiohttp.BasicAuth(config.email, config.password)
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Send a GET request and return the decoded JSON body.

        Only telemetry requests are authenticated; the public geocoder must
        never see the account credentials.
        """
        headers: dict[str, str] = {
            "accept": CONTENT_TYPE,
            "content-type": CONTENT_TYPE,
            "user-agent": self._config.user_agent,
        }
        auth = self._auth if authenticated else None

        _logger.debug("GET %s params=%s", url, redact_for_log(dict(params or {})))

        try:
            async with self._http.get(
                url,
                params=dict(params) if params else None,
                headers=headers,
                auth=auth,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if resp.status in (401, 403):
                    raise FleetAuthenticationError(
                        f"HTTP {resp.status} from {url}: {_error_message(text)}",
                        status_code=resp.status,
                        endpoint=url,
                    )
                if not 200 <= resp.status < 300:
                    raise FleetTransportError(
                        f"HTTP {resp.status} from {url}: {_error_message(text)}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except FleetTransportError:
            raise
        except UnicodeDecodeError as exc:
            raise FleetTransportError(f"Undecodable response from {url}: {exc}", endpoint=url) from exc
        except TimeoutError as exc:
            raise FleetTransportError(f"Request to {url} timed out", endpoint=url) from exc
        except aiohttp.ClientError as exc:
            raise FleetTransportError(f"Request to {url} failed: {exc}", endpoint=url) from exc

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FleetTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                endpoint=url,
            ) from exc

        _logger.debug("GET %s -> %s", url, redact_for_log(result, max_string=128, max_items=3))
        return result

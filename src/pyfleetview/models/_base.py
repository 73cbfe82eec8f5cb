"""Shared parsing helpers for telemetry server payloads.

Traccar serializes timestamps as ISO-8601 strings with an offset, but older
builds and proxies have been seen to drop the offset. Every timestamp that
enters the engine is therefore normalised to an aware UTC datetime so that
staleness arithmetic never mixes naive and aware values.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator

#: Exact ``(latitude, longitude)`` pair.
Coordinate = tuple[float, float]


def safe_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return float(value)
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


UtcDatetime = Annotated[datetime | None, BeforeValidator(_blank_to_none), AfterValidator(ensure_utc)]
"""Annotated type for optional server timestamps, always UTC-aware after validation."""

OptionalFloat = Annotated[float | None, BeforeValidator(safe_float)]
"""Annotated type for optional numeric fields; unparseable values become ``None``."""


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


OptionalText = Annotated[str, BeforeValidator(_none_to_empty)]
"""Annotated type for text fields the server may send as ``null``; ``None`` becomes ``""``."""

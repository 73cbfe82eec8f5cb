"""Device model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from pyfleetview.models._base import OptionalText, UtcDatetime


class Device(BaseModel):
    """A tracked unit as returned by ``GET /devices``.

    Fields the engine does not interpret are kept as extra attributes, and
    the untouched payload is available in ``raw``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
    )

    id: int
    """Stable server-side identifier."""
    name: OptionalText = ""
    """Display name."""
    unique_id: str | None = Field(default=None, validation_alias=AliasChoices("uniqueId", "unique_id"))
    """Hardware identifier (IMEI or similar)."""
    status: str | None = None
    """Server-side connection status (``"online"``, ``"offline"``, ``"unknown"``)."""
    last_update: UtcDatetime = Field(default=None, validation_alias=AliasChoices("lastUpdate", "last_update"))
    """Last time the server heard from the device."""
    position_id: int | None = Field(default=None, validation_alias=AliasChoices("positionId", "position_id"))
    """Identifier of the latest position known to the server."""
    category: str | None = None
    disabled: bool = False
    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "raw" in values:
            return values
        stashed = dict(values)
        stashed["raw"] = dict(values)
        return stashed

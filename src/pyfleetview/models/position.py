"""Position model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from pyfleetview.models._base import Coordinate, OptionalFloat, UtcDatetime


class Position(BaseModel):
    """A single location report as returned by ``GET /positions``.

    ``speed`` and ``course`` are ``None`` when the server omits them; the
    reconciliation engine substitutes ``0``.

    Parameters
    ----------
    device_id : int
        Identifier of the reporting device.
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    speed : float or None
        Speed in knots, as reported by the server.
    course : float or None
        Heading in degrees.
    device_time : datetime or None
        Time of the physical report (not the poll time).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: int | None = None
    device_id: int = Field(validation_alias=AliasChoices("deviceId", "device_id"))
    latitude: float
    longitude: float
    speed: OptionalFloat = None
    course: OptionalFloat = None
    altitude: OptionalFloat = None
    accuracy: OptionalFloat = None
    valid: bool | None = None
    device_time: UtcDatetime = Field(default=None, validation_alias=AliasChoices("deviceTime", "device_time"))
    fix_time: UtcDatetime = Field(default=None, validation_alias=AliasChoices("fixTime", "fix_time"))
    server_time: UtcDatetime = Field(default=None, validation_alias=AliasChoices("serverTime", "server_time"))
    attributes: dict[str, Any] = Field(default_factory=dict)
    raw: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "raw" in values:
            return values
        stashed = dict(values)
        stashed["raw"] = dict(values)
        return stashed

    @property
    def coordinate(self) -> Coordinate:
        return (self.latitude, self.longitude)

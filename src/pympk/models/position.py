"""Unified vehicle position model shared by every provider."""

from __future__ import annotations

import enum
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pympk.models._base import TransitEnum


class Provider(enum.StrEnum):
    """Upstream real-time data source."""

    SIMS = "sims"
    MPK = "mpk"


class VehicleType(TransitEnum):
    """Kind of vehicle.

    MPK sends single-letter codes (``"b"``, ``"t"``) in compact payloads and
    upper-case names in full ones; both resolve here.
    """

    BUS = "BUS"
    TRAM = "TRAM"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value: object) -> VehicleType:
        if isinstance(value, str):
            short = {"b": cls.BUS, "t": cls.TRAM}.get(value.strip().lower())
            if short is not None:
                return short
        member: VehicleType = super()._missing_(value)  # type: ignore[assignment]
        return member


class BoundingBox(BaseModel):
    """Axis-aligned latitude/longitude rectangle, edges inclusive."""

    model_config = ConfigDict(frozen=True)

    min_latitude: float = Field(ge=-90.0, le=90.0)
    min_longitude: float = Field(ge=-180.0, le=180.0)
    max_latitude: float = Field(ge=-90.0, le=90.0)
    max_longitude: float = Field(ge=-180.0, le=180.0)

    @model_validator(mode="after")
    def _check_order(self) -> BoundingBox:
        if self.min_latitude > self.max_latitude:
            raise ValueError("min_latitude must not exceed max_latitude")
        if self.min_longitude > self.max_longitude:
            raise ValueError("min_longitude must not exceed max_longitude")
        return self

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.min_latitude <= latitude <= self.max_latitude
            and self.min_longitude <= longitude <= self.max_longitude
        )


class VehiclePosition(BaseModel):
    """A single point-in-time observation of a transit vehicle.

    Parameters
    ----------
    provider : Provider
        Source that reported the observation.
    vehicle_id : str
        Identifier scoped to ``provider`` (SiMS side number, MPK vehicle code).
        The same physical vehicle may appear under both providers.
    line : str or None
        Line the vehicle is serving, when known.
    latitude : float
        Degrees, within ``[-90, 90]``.
    longitude : float
        Degrees, within ``[-180, 180]``.
    observed_at : datetime
        Timezone-aware observation time.
    heading : float or None
        Degrees clockwise from north, ``[0, 360)``.
    speed : float or None
        km/h.
    vehicle_type : VehicleType
        Bus or tram.
    direction : str or None
        Direction or destination label as reported by the provider.
    brigade : str or None
        SiMS brigade or MPK course identifier.
    delay : int or None
        Delay as reported by the provider, unconverted.
    is_connected : bool or None
        SiMS flag telling whether the vehicle is logged in to a line.
    """

    model_config = ConfigDict(frozen=True)

    provider: Provider
    vehicle_id: str = Field(min_length=1)
    line: str | None = None
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    observed_at: datetime
    heading: float | None = Field(default=None, ge=0.0, lt=360.0)
    speed: float | None = Field(default=None, ge=0.0)
    vehicle_type: VehicleType = VehicleType.UNKNOWN
    direction: str | None = None
    brigade: str | None = None
    delay: int | None = None
    is_connected: bool | None = None

    @field_validator("observed_at")
    @classmethod
    def _require_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("observed_at must be timezone-aware")
        return value

    def is_future(self, now: datetime, tolerance: timedelta) -> bool:
        """Whether the observation lies further in the future than *tolerance* allows."""
        return self.observed_at > now + tolerance

    @property
    def sort_key(self) -> tuple[str, str, datetime]:
        return (self.provider.value, self.vehicle_id, self.observed_at)

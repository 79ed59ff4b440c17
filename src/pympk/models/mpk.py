"""MPK Wrocław mobile API response models.

The API answers in two dialects: compact single-letter keys (what the
mobile app receives) and long keys. Models accept both.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from pympk._normalize import parse_local_datetime
from pympk.models._base import OptionalInt, OptionalText, TransitBaseModel
from pympk.models.position import VehicleType

# Error responses carry exactly these keys instead of the requested payload.
_ERROR_KEYS = frozenset({"info", "message", "stackTrace"})


def _to_vehicle_type(value: Any) -> Any:
    if isinstance(value, str):
        return VehicleType(value)
    return value


class MpkBus(TransitBaseModel):
    """Vehicle entry from ``function=getPositions``.

    ``x`` carries the longitude and ``y`` the latitude.
    """

    code: int = Field(validation_alias=AliasChoices("code", "v"))
    course: int | None = Field(default=None, validation_alias=AliasChoices("course", "c"))
    longitude: float = Field(validation_alias=AliasChoices("x", "longitude"))
    latitude: float = Field(validation_alias=AliasChoices("y", "latitude"))
    line: str = Field(validation_alias=AliasChoices("line", "l"))
    vehicle_type: Annotated[VehicleType, BeforeValidator(_to_vehicle_type)] = Field(
        default=VehicleType.UNKNOWN,
        validation_alias=AliasChoices("type", "t", "vehicle_type"),
    )
    symbol: OptionalText = Field(default=None, validation_alias=AliasChoices("symbol", "s"))
    direction: OptionalText = Field(default=None, validation_alias=AliasChoices("direction", "d"))
    delay: OptionalInt = Field(default=None, validation_alias=AliasChoices("delay", "e"))


class MpkBusList(BaseModel):
    """``getPositions`` payload: a JSON array whose first element is the
    server timestamp, followed by bus objects."""

    model_config = ConfigDict(frozen=True)

    timestamp: str
    buses: tuple[MpkBus, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _split_array(cls, values: Any) -> Any:
        if not isinstance(values, list):
            return values
        if not values:
            raise ValueError("expected an array with a timestamp followed by bus objects")
        return {"timestamp": values[0], "buses": values[1:]}

    def observed_at(self, zone: tzinfo) -> datetime:
        """The list timestamp (MPK local time) as a UTC datetime."""
        return parse_local_datetime(self.timestamp, zone)


class MpkErrorPayload(TransitBaseModel):
    info: str = ""
    message: str = ""
    stack_trace: str = ""

    @staticmethod
    def matches(payload: Any) -> bool:
        return isinstance(payload, dict) and _ERROR_KEYS.issubset(payload)


class MpkBusStop(TransitBaseModel):
    """Upcoming departure from ``function=getPostInfo``."""

    label: str = Field(validation_alias=AliasChoices("l", "label"))
    direction: str = Field(validation_alias=AliasChoices("d", "direction"))
    time: str = Field(validation_alias=AliasChoices("t", "time"))
    course: int = Field(validation_alias=AliasChoices("c", "course"))


class MpkCourse(TransitBaseModel):
    symbol: str = Field(validation_alias=AliasChoices("s", "symbol"))
    time: str = Field(validation_alias=AliasChoices("t", "time"))


class MpkCourseInfo(TransitBaseModel):
    """Course from ``function=getCoursePosts``.

    ``encoded`` is the course shape as a Google encoded polyline.
    """

    course: int = Field(validation_alias=AliasChoices("c", "course"))
    encoded: str = Field(default="", validation_alias=AliasChoices("p", "encoded"))
    stops: tuple[MpkCourse, ...] = Field(default=(), validation_alias=AliasChoices("r", "stops"))


class MpkPostPlateHour(TransitBaseModel):
    hour: int = Field(validation_alias=AliasChoices("h", "hour"))
    # Each entry is "<minute><abbreviation>", e.g. "05a".
    minutes: tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("m", "minutes"))


class MpkPostPlateDay(TransitBaseModel):
    day_name: str = Field(validation_alias=AliasChoices("d", "day_name"))
    order: int = Field(validation_alias=AliasChoices("o", "order"))
    hours: tuple[MpkPostPlateHour, ...] = Field(default=(), validation_alias=AliasChoices("h", "hours"))


class MpkPostPlateDirection(TransitBaseModel):
    direction: str = Field(validation_alias=AliasChoices("n", "direction"))
    days: tuple[MpkPostPlateDay, ...] = Field(default=(), validation_alias=AliasChoices("d", "days"))


class MpkPostPlateTimetable(TransitBaseModel):
    valid_from: str = Field(validation_alias=AliasChoices("t", "valid_from"))
    directions: tuple[MpkPostPlateDirection, ...] = Field(default=(), validation_alias=AliasChoices("v", "directions"))


class MpkPostPlate(TransitBaseModel):
    """Printed stop timetable from ``function=getPostPlate``."""

    line: str = Field(validation_alias=AliasChoices("l", "line"))
    post: str = Field(validation_alias=AliasChoices("p", "post"))
    abbreviations: tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("s", "abbreviations"))
    timetables: tuple[MpkPostPlateTimetable, ...] = Field(default=(), validation_alias=AliasChoices("t", "timetables"))

"""SiMS map service response models."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pympk.models._base import EpochTimestamp, OptionalFloat, OptionalInt, OptionalText, StrippedText, TransitBaseModel


class SimsBus(TransitBaseModel):
    """Vehicle entry from ``GET /vehicles``.

    ``line``, ``direction`` and ``delay`` are only present while the
    vehicle is logged in to a course (``is_connected``).
    """

    side_number: str
    # The API spells it "recieveTime".
    receive_time: EpochTimestamp = Field(validation_alias=AliasChoices("recieveTime", "receiveTime", "receive_time"))
    is_connected: bool = False
    latitude: float
    longitude: float
    previous_latitude: OptionalFloat = None
    previous_longitude: OptionalFloat = None
    brigade: OptionalText = None
    direction: OptionalText = None
    line: OptionalText = None
    delay: OptionalInt = None


class SimsBusStop(TransitBaseModel):
    """Stop entry from ``GET /timetables/busStops``."""

    code: str = Field(validation_alias=AliasChoices("busStopCode", "code"))
    name: str = Field(validation_alias=AliasChoices("busStopName", "name"))
    latitude: float = Field(validation_alias=AliasChoices("busStopLatitude", "latitude"))
    longitude: float = Field(validation_alias=AliasChoices("busStopLongitude", "longitude"))


class SimsTimetableLine(TransitBaseModel):
    id: int
    name: str
    number: StrippedText


class SimsTimetableDirection(TransitBaseModel):
    id: int
    name: str


class SimsTimetable(TransitBaseModel):
    """Departure entry from ``GET /timetables/busStops/{code}``."""

    line: SimsTimetableLine
    direction: SimsTimetableDirection
    timetable_departure_time: EpochTimestamp
    show_type: int
    departure_hide: bool

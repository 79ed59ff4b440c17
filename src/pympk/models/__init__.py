"""Data models for vehicle positions and provider API responses."""

from pympk.models._base import EpochTimestamp, TransitBaseModel, TransitEnum
from pympk.models.mpk import (
    MpkBus,
    MpkBusList,
    MpkBusStop,
    MpkCourse,
    MpkCourseInfo,
    MpkErrorPayload,
    MpkPostPlate,
    MpkPostPlateDay,
    MpkPostPlateDirection,
    MpkPostPlateHour,
    MpkPostPlateTimetable,
)
from pympk.models.position import BoundingBox, Provider, VehiclePosition, VehicleType
from pympk.models.query import Query
from pympk.models.result import FetchResult, ProviderFailure
from pympk.models.sims import SimsBus, SimsBusStop, SimsTimetable, SimsTimetableDirection, SimsTimetableLine

__all__ = [
    "BoundingBox",
    "EpochTimestamp",
    "FetchResult",
    "MpkBus",
    "MpkBusList",
    "MpkBusStop",
    "MpkCourse",
    "MpkCourseInfo",
    "MpkErrorPayload",
    "MpkPostPlate",
    "MpkPostPlateDay",
    "MpkPostPlateDirection",
    "MpkPostPlateHour",
    "MpkPostPlateTimetable",
    "Provider",
    "ProviderFailure",
    "Query",
    "SimsBus",
    "SimsBusStop",
    "SimsTimetable",
    "SimsTimetableDirection",
    "SimsTimetableLine",
    "TransitBaseModel",
    "TransitEnum",
    "VehiclePosition",
    "VehicleType",
]

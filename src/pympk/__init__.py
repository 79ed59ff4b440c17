"""pympk - Async Python client for Wrocław real-time transit vehicle positions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pympk")
except PackageNotFoundError:
    __version__ = "0+local"
from pympk.client import TransitClient
from pympk.config import TransitConfig
from pympk.exceptions import (
    NetworkError,
    TransitApiError,
    TransitConfigError,
    TransitError,
    TransitFetchError,
    TransitParseError,
    TransitPartialFailureError,
    TransitTimeoutError,
    UpstreamError,
)
from pympk.models import (
    BoundingBox,
    FetchResult,
    MpkBus,
    MpkBusList,
    MpkBusStop,
    MpkCourseInfo,
    MpkPostPlate,
    Provider,
    ProviderFailure,
    Query,
    SimsBus,
    SimsBusStop,
    SimsTimetable,
    VehiclePosition,
    VehicleType,
)
from pympk.sources import MpkSource, PositionSource, SimsSource

__all__ = [
    "__version__",
    "BoundingBox",
    "FetchResult",
    "MpkBus",
    "MpkBusList",
    "MpkBusStop",
    "MpkCourseInfo",
    "MpkPostPlate",
    "MpkSource",
    "NetworkError",
    "PositionSource",
    "Provider",
    "ProviderFailure",
    "Query",
    "SimsBus",
    "SimsBusStop",
    "SimsSource",
    "SimsTimetable",
    "TransitApiError",
    "TransitClient",
    "TransitConfig",
    "TransitConfigError",
    "TransitError",
    "TransitFetchError",
    "TransitParseError",
    "TransitPartialFailureError",
    "TransitTimeoutError",
    "UpstreamError",
    "VehiclePosition",
    "VehicleType",
]

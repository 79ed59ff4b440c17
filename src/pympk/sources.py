"""Provider adapters.

Each adapter turns one upstream into :class:`VehiclePosition` snapshots.
They share no state: each owns its transport (and through it its own
connection pool), so a failure in one never touches the other.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol, TypeVar

from pydantic import ValidationError

from pympk._api import mpk as _mpk_api
from pympk._api import sims as _sims_api
from pympk._normalize import initial_bearing
from pympk._transport import Transport
from pympk.config import TransitConfig
from pympk.exceptions import TransitParseError, TransitTimeoutError, UpstreamError
from pympk.models.mpk import MpkBus, MpkBusList, MpkBusStop, MpkCourseInfo, MpkPostPlate
from pympk.models.position import Provider, VehiclePosition, VehicleType
from pympk.models.query import Query
from pympk.models.result import FetchResult, ProviderFailure
from pympk.models.sims import SimsBus, SimsBusStop, SimsTimetable

_logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
T = TypeVar("T")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class PositionSource(Protocol):
    """Capability shared by every provider adapter."""

    @property
    def provider(self) -> Provider:
        ...

    async def fetch(self, query: Query | None = None) -> FetchResult:
        ...


def build_positions(
    provider: Provider,
    records: Iterable[dict[str, Any]],
    query: Query,
    *,
    now: datetime,
    tolerance: timedelta,
) -> tuple[list[VehiclePosition], int]:
    """Validate normalized records, returning ``(matching positions, rejected count)``.

    Records that break a position invariant are counted, not raised: one
    bad GPS fix must not discard the rest of the feed.
    """
    positions: list[VehiclePosition] = []
    rejected = 0
    for record in records:
        try:
            position = VehiclePosition(provider=provider, **record)
        except ValidationError as exc:
            rejected += 1
            _logger.debug("Rejected %s record %s: %s", provider.value, record.get("vehicle_id"), exc)
            continue
        if position.is_future(now, tolerance):
            rejected += 1
            _logger.debug(
                "Rejected %s record %s: observed_at %s is in the future",
                provider.value,
                position.vehicle_id,
                position.observed_at.isoformat(),
            )
            continue
        if query.matches(position):
            positions.append(position)
    return positions, rejected


def _deadline(config: TransitConfig, query: Query) -> float:
    return query.timeout if query.timeout is not None else config.request_timeout


async def _within_deadline(provider: Provider, deadline: float, awaitable: Awaitable[T]) -> T:
    """Await *awaitable*, converting an expired deadline to ``TransitTimeoutError``.

    Cancelling the pending request releases its connection.
    """
    try:
        async with asyncio.timeout(deadline):
            return await awaitable
    except TransitTimeoutError:
        raise
    except TimeoutError as exc:
        raise TransitTimeoutError(
            f"{provider.value} did not answer within {deadline}s",
            provider=provider,
        ) from exc


def _error_source(error: UpstreamError) -> str:
    return error.endpoint


class SimsSource:
    """Adapter for the SiMS map service (all configured hosts)."""

    _provider = Provider.SIMS

    def __init__(self, config: TransitConfig, transport: Transport, *, clock: Clock | None = None) -> None:
        self._config = config
        self._transport = transport
        self._clock = clock or _utc_now

    @property
    def provider(self) -> Provider:
        return self._provider

    @staticmethod
    def to_record(bus: SimsBus) -> dict[str, Any]:
        heading = None
        if bus.previous_latitude is not None and bus.previous_longitude is not None:
            heading = initial_bearing(bus.previous_latitude, bus.previous_longitude, bus.latitude, bus.longitude)
        return {
            "vehicle_id": bus.side_number,
            "line": bus.line,
            "latitude": bus.latitude,
            "longitude": bus.longitude,
            "observed_at": bus.receive_time,
            "heading": heading,
            "vehicle_type": VehicleType.BUS,
            "direction": bus.direction,
            "brigade": bus.brigade,
            "delay": bus.delay,
            "is_connected": bus.is_connected,
        }

    async def fetch(self, query: Query | None = None) -> FetchResult:
        """Fetch vehicle positions from every SiMS host.

        Hosts that fail become :class:`ProviderFailure` entries on the result.

        Raises
        ------
        TransitTimeoutError
            The whole fan-out did not finish within the deadline.
        TransitError
            Every host failed; the first host's error is raised and the
            others are attached as notes.
        """
        if query is None:
            query = Query.for_provider(self._provider)
        deadline = _deadline(self._config, query)
        buses, errors = await _within_deadline(
            self._provider,
            deadline,
            _sims_api.fetch_buses(self._config, self._transport, timeout=deadline),
        )

        if errors and len(errors) == len(self._config.sims_base_urls):
            first, *rest = errors
            for other in rest:
                first.add_note(f"also failed: {other}")
            raise first

        failures = [ProviderFailure(self._provider, error, _error_source(error)) for error in errors]
        positions, rejected = build_positions(
            self._provider,
            (self.to_record(bus) for bus in buses),
            query,
            now=self._clock(),
            tolerance=timedelta(seconds=self._config.clock_skew_tolerance),
        )
        return FetchResult.build(self._provider, positions, failures=failures, rejected=rejected)

    async def get_buses(self) -> tuple[list[SimsBus], list[UpstreamError]]:
        return await _sims_api.fetch_buses(self._config, self._transport)

    async def get_bus_stops(self) -> tuple[list[SimsBusStop], list[UpstreamError]]:
        return await _sims_api.fetch_bus_stops(self._config, self._transport)

    async def get_timetable(self, bus_stop_code: str | int) -> tuple[list[SimsTimetable], list[UpstreamError]]:
        return await _sims_api.fetch_timetable(self._config, self._transport, bus_stop_code)


class MpkSource:
    """Adapter for the MPK Wrocław mobile API."""

    _provider = Provider.MPK

    def __init__(self, config: TransitConfig, transport: Transport, *, clock: Clock | None = None) -> None:
        self._config = config
        self._transport = transport
        self._clock = clock or _utc_now

    @property
    def provider(self) -> Provider:
        return self._provider

    @staticmethod
    def to_record(bus: MpkBus, observed_at: datetime) -> dict[str, Any]:
        return {
            "vehicle_id": str(bus.code),
            "line": bus.line,
            "latitude": bus.latitude,
            "longitude": bus.longitude,
            "observed_at": observed_at,
            "vehicle_type": bus.vehicle_type,
            "direction": bus.direction,
            "brigade": str(bus.course) if bus.course is not None else None,
            "delay": bus.delay,
        }

    def _observed_at(self, bus_list: MpkBusList) -> datetime:
        try:
            return bus_list.observed_at(self._config.zone)
        except ValueError as exc:
            raise TransitParseError(
                f"getPositions timestamp {bus_list.timestamp!r} is not a valid date",
                provider=self._provider,
                endpoint="function=getPositions",
            ) from exc

    async def fetch(self, query: Query | None = None) -> FetchResult:
        """Fetch vehicle positions reported during the configured lookback window.

        Raises
        ------
        TransitTimeoutError
            No answer within the deadline.
        TransitFetchError
            Network failure, non-2xx status or an MPK error object.
        TransitParseError
            The payload did not match the expected schema.
        """
        if query is None:
            query = Query.for_provider(self._provider)
        now = self._clock()
        deadline = _deadline(self._config, query)
        bus_list = await _within_deadline(
            self._provider,
            deadline,
            _mpk_api.fetch_buses(self._config, self._transport, now=now, timeout=deadline),
        )

        observed_at = self._observed_at(bus_list)
        positions, rejected = build_positions(
            self._provider,
            (self.to_record(bus, observed_at) for bus in bus_list.buses),
            query,
            now=now,
            tolerance=timedelta(seconds=self._config.clock_skew_tolerance),
        )
        return FetchResult.build(self._provider, positions, rejected=rejected)

    async def get_buses(self) -> MpkBusList:
        return await _mpk_api.fetch_buses(self._config, self._transport, now=self._clock())

    async def get_post_info(self, symbol: str) -> list[MpkBusStop]:
        return await _mpk_api.fetch_post_info(self._config, self._transport, symbol)

    async def get_course_posts(self, courses: Iterable[str | int]) -> list[MpkCourseInfo]:
        return await _mpk_api.fetch_course_posts(self._config, self._transport, courses)

    async def get_post_plate(self, post: str, line: str) -> MpkPostPlate:
        return await _mpk_api.fetch_post_plate(self._config, self._transport, post, line)

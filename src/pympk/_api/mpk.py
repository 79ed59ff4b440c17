"""MPK Wrocław mobile API endpoints.

All calls hit the single ``/mobile`` endpoint with a ``function`` query
parameter and HTTP Digest authentication (handled by the transport).

Functions:
  - getPositions
  - getPostInfo
  - getCoursePosts
  - getPostPlate
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from pympk._api._common import parse_model, parse_model_list
from pympk._normalize import format_local_datetime
from pympk._transport import Transport
from pympk.config import TransitConfig
from pympk.exceptions import TransitApiError
from pympk.models.mpk import MpkBusList, MpkBusStop, MpkCourseInfo, MpkErrorPayload, MpkPostPlate
from pympk.models.position import Provider

_logger = logging.getLogger(__name__)


def _endpoint(function: str) -> str:
    return f"function={function}"


async def get_data(
    config: TransitConfig,
    transport: Transport,
    params: dict[str, str],
    *,
    timeout: float | None = None,
) -> Any:
    """Call one MPK function and return the decoded JSON.

    Raises
    ------
    TransitApiError
        The API answered with its ``{info, message, stackTrace}`` error object.
    """
    payload = await transport.get_json(config.mpk_base_url, params=params, timeout=timeout)
    if MpkErrorPayload.matches(payload):
        endpoint = _endpoint(params.get("function", ""))
        error = parse_model(MpkErrorPayload, payload, provider=Provider.MPK, endpoint=endpoint)
        _logger.debug("MPK %s returned error info=%s", endpoint, error.info)
        raise TransitApiError(
            f"{endpoint} failed: {error.info}: {error.message}",
            provider=Provider.MPK,
            endpoint=endpoint,
            info=error.info,
            stack_trace=error.stack_trace,
        )
    return payload


def positions_since(config: TransitConfig, now: datetime | None = None) -> str:
    """The ``date`` argument for getPositions: *now* minus the lookback, in MPK local time."""
    if now is None:
        now = datetime.now(UTC)
    since = now - timedelta(seconds=config.mpk_positions_lookback)
    return format_local_datetime(since, config.zone)


async def fetch_buses(
    config: TransitConfig,
    transport: Transport,
    *,
    now: datetime | None = None,
    timeout: float | None = None,
) -> MpkBusList:
    params = {"function": "getPositions", "date": positions_since(config, now)}
    payload = await get_data(config, transport, params, timeout=timeout)
    return parse_model(MpkBusList, payload, provider=Provider.MPK, endpoint=_endpoint("getPositions"))


async def fetch_post_info(config: TransitConfig, transport: Transport, symbol: str) -> list[MpkBusStop]:
    """Upcoming departures from stop *symbol*."""
    payload = await get_data(config, transport, {"function": "getPostInfo", "symbol": symbol})
    return parse_model_list(MpkBusStop, payload, provider=Provider.MPK, endpoint=_endpoint("getPostInfo"))


async def fetch_course_posts(
    config: TransitConfig,
    transport: Transport,
    courses: Iterable[str | int],
) -> list[MpkCourseInfo]:
    """Stops and shapes for the given course ids."""
    joined = ",".join(str(course) for course in courses)
    payload = await get_data(config, transport, {"function": "getCoursePosts", "courses": joined})
    return parse_model_list(MpkCourseInfo, payload, provider=Provider.MPK, endpoint=_endpoint("getCoursePosts"))


async def fetch_post_plate(config: TransitConfig, transport: Transport, post: str, line: str) -> MpkPostPlate:
    params = {"function": "getPostPlate", "post": post, "line": line, "output": "json"}
    payload = await get_data(config, transport, params)
    return parse_model(MpkPostPlate, payload, provider=Provider.MPK, endpoint=_endpoint("getPostPlate"))

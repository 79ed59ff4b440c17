"""SiMS endpoints.

Endpoints (relative to every configured host):
  - /vehicles
  - /timetables/busStops
  - /timetables/busStops/{code}

Each host is queried concurrently and fails independently: the result is
always the items from hosts that answered plus the errors from hosts that
did not.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TypeVar

from pydantic import BaseModel

from pympk._api._common import parse_model_list
from pympk._transport import Transport
from pympk.config import TransitConfig
from pympk.exceptions import TransitFetchError, TransitParseError, UpstreamError
from pympk.models.position import Provider
from pympk.models.sims import SimsBus, SimsBusStop, SimsTimetable

_logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=BaseModel)

VEHICLES_PATH = "vehicles"
BUS_STOPS_PATH = "timetables/busStops"


async def _fetch_host(
    transport: Transport,
    url: str,
    model: type[TModel],
    timeout: float | None,
) -> list[TModel] | UpstreamError:
    try:
        payload = await transport.get_json(url, timeout=timeout)
        return parse_model_list(model, payload, provider=Provider.SIMS, endpoint=url)
    except (TransitFetchError, TransitParseError) as exc:
        _logger.warning("SiMS host request failed: %s", exc)
        return exc


async def fetch_from_hosts(
    config: TransitConfig,
    transport: Transport,
    path: str,
    model: type[TModel],
    *,
    timeout: float | None = None,
) -> tuple[list[TModel], list[UpstreamError]]:
    """GET *path* from every SiMS host, returning ``(items, errors)``.

    Items keep host order, so a stable upstream yields a stable list.
    """
    urls = [f"{host.rstrip('/')}/{path}" for host in config.sims_base_urls]
    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(_fetch_host(transport, url, model, timeout)) for url in urls]

    items: list[TModel] = []
    errors: list[UpstreamError] = []
    for task in tasks:
        outcome = task.result()
        if isinstance(outcome, (TransitFetchError, TransitParseError)):
            errors.append(outcome)
        else:
            items.extend(outcome)
    return items, errors


async def fetch_buses(
    config: TransitConfig,
    transport: Transport,
    *,
    timeout: float | None = None,
) -> tuple[list[SimsBus], list[UpstreamError]]:
    return await fetch_from_hosts(config, transport, VEHICLES_PATH, SimsBus, timeout=timeout)


async def fetch_bus_stops(
    config: TransitConfig,
    transport: Transport,
) -> tuple[list[SimsBusStop], list[UpstreamError]]:
    return await fetch_from_hosts(config, transport, BUS_STOPS_PATH, SimsBusStop)


async def fetch_timetable(
    config: TransitConfig,
    transport: Transport,
    bus_stop_code: str | int,
) -> tuple[list[SimsTimetable], list[UpstreamError]]:
    """Upcoming departures for one stop, e.g. ``fetch_timetable(..., 31918010)``."""
    return await fetch_from_hosts(config, transport, f"{BUS_STOPS_PATH}/{bus_stop_code}", SimsTimetable)

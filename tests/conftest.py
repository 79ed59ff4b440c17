from __future__ import annotations

import asyncio
import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest

from pympk.config import TransitConfig
from pympk.exceptions import TransitFetchError
from pympk.models.position import Provider

SIMS_HOSTS = ("https://sims-a.test", "https://sims-b.test", "https://sims-c.test")
MPK_URL = "https://mpk.test/mobile"

# 2025-02-21 17:40:00 UTC, shortly after the fixture timestamps below.
FIXED_NOW = datetime(2025, 2, 21, 17, 40, tzinfo=UTC)

SIMS_BUS_CONNECTED: dict[str, Any] = {
    "sideNumber": "1001",
    "recieveTime": 1740159556672,
    "isConnected": True,
    "latitude": 51.1,
    "longitude": 17.03,
    "previousLatitude": 51.099,
    "previousLongitude": 17.03,
    "brigade": "90701",
    "direction": "PL. GRUNWALDZKI",
    "line": "911",
    "delay": 60,
}

SIMS_BUS_IDLE: dict[str, Any] = {
    "sideNumber": "1007",
    "recieveTime": 1740159556672,
    "isConnected": False,
    "latitude": 51.09502166666667,
    "longitude": 16.962031666666668,
    "previousLatitude": 51.095025,
    "previousLongitude": 16.96203,
    "brigade": "90701",
}

MPK_POSITIONS: list[Any] = [
    "2025-02-21 18:39:00",
    {"v": 8418, "c": 25626631, "x": 17.051289, "y": 51.11734, "l": "N", "t": "b", "s": "20903", "d": "29324", "e": 0},
    {
        "code": 2312,
        "course": 25626632,
        "x": 17.03,
        "y": 51.1,
        "line": "33",
        "type": "TRAM",
        "symbol": "24105",
        "direction": "29324",
        "delay": 27000,
    },
]


@dataclass
class FakeUpstream:
    """Stands in for ``HttpTransport``.

    ``responses`` maps a SiMS URL or an MPK ``function`` name to a JSON
    payload, or to an exception instance to raise.
    """

    responses: dict[str, Any] = field(default_factory=dict)
    hang: set[str] = field(default_factory=set)
    calls: list[tuple[str, dict[str, str]]] = field(default_factory=list)
    cancelled: list[str] = field(default_factory=list)
    timeouts: list[float | None] = field(default_factory=list)

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        params = dict(params or {})
        self.calls.append((url, params))
        self.timeouts.append(timeout)
        key = params.get("function", url)
        if key in self.hang:
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                self.cancelled.append(key)
                raise
        if key not in self.responses:
            raise AssertionError(f"Unexpected request in fake upstream: {key}")
        response = self.responses[key]
        if isinstance(response, BaseException):
            raise response
        return copy.deepcopy(response)


def sims_url(host: str, path: str = "vehicles") -> str:
    return f"{host}/{path}"


def unreachable(url: str, provider: Provider) -> TransitFetchError:
    return TransitFetchError(f"Request to {url} failed: Cannot connect", provider=provider, endpoint=url)


@pytest.fixture
def config() -> TransitConfig:
    return TransitConfig(sims_base_urls=SIMS_HOSTS, mpk_base_url=MPK_URL, request_timeout=5.0)


@pytest.fixture
def clock() -> Any:
    return lambda: FIXED_NOW


@pytest.fixture
def sims_upstream() -> FakeUpstream:
    return FakeUpstream(
        responses={
            sims_url(SIMS_HOSTS[0]): [SIMS_BUS_CONNECTED],
            sims_url(SIMS_HOSTS[1]): [SIMS_BUS_IDLE],
            sims_url(SIMS_HOSTS[2]): [],
        }
    )


@pytest.fixture
def mpk_upstream() -> FakeUpstream:
    return FakeUpstream(responses={"getPositions": MPK_POSITIONS})

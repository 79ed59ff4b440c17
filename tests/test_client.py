from __future__ import annotations

from typing import Any

import pytest

from conftest import MPK_POSITIONS, MPK_URL, SIMS_BUS_CONNECTED, SIMS_HOSTS, FakeUpstream, sims_url, unreachable
from pympk.client import TransitClient
from pympk.config import TransitConfig
from pympk.exceptions import TransitError, TransitFetchError, TransitParseError, TransitPartialFailureError
from pympk.models.position import Provider
from pympk.models.query import Query


def _client(config: TransitConfig, sims: FakeUpstream, mpk: FakeUpstream, clock: Any) -> TransitClient:
    return TransitClient(config, transports={Provider.SIMS: sims, Provider.MPK: mpk}, clock=clock)


@pytest.mark.asyncio
async def test_get_positions_merges_providers(
    config: TransitConfig, sims_upstream: FakeUpstream, mpk_upstream: FakeUpstream, clock: Any
) -> None:
    async with _client(config, sims_upstream, mpk_upstream, clock) as client:
        result = await client.get_positions()

    assert [(p.provider, p.vehicle_id) for p in result.positions] == [
        (Provider.MPK, "2312"),
        (Provider.MPK, "8418"),
        (Provider.SIMS, "1001"),
        (Provider.SIMS, "1007"),
    ]
    assert result.succeeded == frozenset(Provider)
    assert result.failures == ()
    assert not result.is_partial


@pytest.mark.asyncio
async def test_unreachable_mpk_degrades_to_partial(
    config: TransitConfig, sims_upstream: FakeUpstream, clock: Any
) -> None:
    mpk = FakeUpstream(responses={"getPositions": unreachable(MPK_URL, Provider.MPK)})

    async with _client(config, sims_upstream, mpk, clock) as client:
        result = await client.get_positions()

    assert result.is_partial
    assert result.for_provider(Provider.SIMS)
    assert result.for_provider(Provider.MPK) == ()
    assert result.failed_providers == frozenset({Provider.MPK})
    assert isinstance(result.failures[0].error, TransitFetchError)
    assert result.failures[0].source == "mpk"


@pytest.mark.asyncio
async def test_malformed_mpk_leaves_sims_intact(
    config: TransitConfig, sims_upstream: FakeUpstream, clock: Any
) -> None:
    mpk = FakeUpstream(responses={"getPositions": {"garbage": True}})

    async with _client(config, sims_upstream, mpk, clock) as client:
        partial = await client.get_positions()
        sims_only = await client.get_positions(Query(providers={Provider.SIMS}))

    assert isinstance(partial.failures[0].error, TransitParseError)
    assert partial.positions == sims_only.positions


@pytest.mark.asyncio
async def test_require_all_raises_with_partial_result(
    config: TransitConfig, sims_upstream: FakeUpstream, clock: Any
) -> None:
    mpk = FakeUpstream(responses={"getPositions": unreachable(MPK_URL, Provider.MPK)})

    async with _client(config, sims_upstream, mpk, clock) as client:
        with pytest.raises(TransitPartialFailureError) as exc_info:
            await client.get_positions(Query(require_all=True))

    assert exc_info.value.result is not None
    assert [p.vehicle_id for p in exc_info.value.result.positions] == ["1001", "1007"]
    assert [f.provider for f in exc_info.value.failures] == [Provider.MPK]


@pytest.mark.asyncio
async def test_single_provider_query_propagates_error(
    config: TransitConfig, sims_upstream: FakeUpstream, clock: Any
) -> None:
    mpk = FakeUpstream(responses={"getPositions": unreachable(MPK_URL, Provider.MPK)})

    async with _client(config, sims_upstream, mpk, clock) as client:
        with pytest.raises(TransitFetchError) as exc_info:
            await client.get_positions(Query(providers={Provider.MPK}))

    assert exc_info.value.provider is Provider.MPK
    assert sims_upstream.calls == []


@pytest.mark.asyncio
async def test_single_provider_query_only_returns_that_provider(
    config: TransitConfig, sims_upstream: FakeUpstream, mpk_upstream: FakeUpstream, clock: Any
) -> None:
    async with _client(config, sims_upstream, mpk_upstream, clock) as client:
        result = await client.get_positions(Query(providers=Provider.MPK))

    assert {p.provider for p in result.positions} == {Provider.MPK}
    assert sims_upstream.calls == []


@pytest.mark.asyncio
async def test_all_providers_failing_raises(config: TransitConfig, clock: Any) -> None:
    sims = FakeUpstream(
        responses={sims_url(host): unreachable(sims_url(host), Provider.SIMS) for host in SIMS_HOSTS}
    )
    mpk = FakeUpstream(responses={"getPositions": unreachable(MPK_URL, Provider.MPK)})

    async with _client(config, sims, mpk, clock) as client:
        with pytest.raises(TransitPartialFailureError) as exc_info:
            await client.get_positions()

    assert exc_info.value.result is not None
    assert exc_info.value.result.positions == ()
    assert [f.provider for f in exc_info.value.failures] == [Provider.SIMS, Provider.MPK]


@pytest.mark.asyncio
async def test_repeated_queries_are_deterministic(
    config: TransitConfig, sims_upstream: FakeUpstream, mpk_upstream: FakeUpstream, clock: Any
) -> None:
    query = Query(lines={"911", "n"})

    async with _client(config, sims_upstream, mpk_upstream, clock) as client:
        first = await client.get_positions(query)
        second = await client.get_positions(query)

    assert first == second
    assert [p.line for p in first.positions] == ["N", "911"]


@pytest.mark.asyncio
async def test_source_lookup(
    config: TransitConfig, sims_upstream: FakeUpstream, mpk_upstream: FakeUpstream, clock: Any
) -> None:
    async with _client(config, sims_upstream, mpk_upstream, clock) as client:
        assert client.source(Provider.SIMS) is client.sims
        assert client.source(Provider.MPK) is client.mpk
        assert client.config is config


def test_sources_require_context_manager(config: TransitConfig) -> None:
    client = TransitClient(config)

    with pytest.raises(TransitError, match="not initialized"):
        _ = client.sims
    with pytest.raises(TransitError, match="not initialized"):
        _ = client.mpk


@pytest.mark.asyncio
async def test_non_finite_values_do_not_disturb_other_provider(config: TransitConfig, clock: Any) -> None:
    sims = FakeUpstream(
        responses={
            sims_url(SIMS_HOSTS[0]): [dict(SIMS_BUS_CONNECTED, previousLatitude=float("inf"))],
            sims_url(SIMS_HOSTS[1]): [],
            sims_url(SIMS_HOSTS[2]): [],
        }
    )
    mpk_payload = [MPK_POSITIONS[0], dict(MPK_POSITIONS[1], e=float("inf")), MPK_POSITIONS[2]]
    mpk = FakeUpstream(responses={"getPositions": mpk_payload})

    async with _client(config, sims, mpk, clock) as client:
        result = await client.get_positions()

    assert result.failures == ()
    assert [p.vehicle_id for p in result.for_provider(Provider.SIMS)] == ["1001"]
    assert [p.vehicle_id for p in result.for_provider(Provider.MPK)] == ["2312", "8418"]

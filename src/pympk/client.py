"""High-level async client merging every Wrocław real-time provider."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from pympk._transport import HttpTransport, Transport
from pympk.config import TransitConfig
from pympk.exceptions import TransitError, TransitPartialFailureError
from pympk.models.position import Provider
from pympk.models.query import Query
from pympk.models.result import FetchResult, ProviderFailure
from pympk.sources import Clock, MpkSource, PositionSource, SimsSource

_logger = logging.getLogger(__name__)


class TransitClient:
    """Async client for Wrocław vehicle positions.

    Usage::

        async with TransitClient() as client:
            result = await client.get_positions(Query(lines={"N", "145"}))
            for position in result.positions:
                ...
            for failure in result.failures:
                ...

    Each provider gets its own ``aiohttp.ClientSession`` unless *session*
    is given, in which case that session is shared and left open on exit.
    *transports* replaces the HTTP layer per provider (mainly for tests).
    """

    def __init__(
        self,
        config: TransitConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transports: Mapping[Provider, Transport] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config if config is not None else TransitConfig()
        self._external_session = session
        self._injected_transports = dict(transports or {})
        self._clock = clock
        self._owned_sessions: list[aiohttp.ClientSession] = []
        self._sims: SimsSource | None = None
        self._mpk: MpkSource | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TransitClient:
        self._sims = SimsSource(self._config, self._transport_for(Provider.SIMS), clock=self._clock)
        self._mpk = MpkSource(self._config, self._transport_for(Provider.MPK), clock=self._clock)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        sessions, self._owned_sessions = self._owned_sessions, []
        for http_session in sessions:
            await http_session.close()
        self._sims = None
        self._mpk = None

    def _transport_for(self, provider: Provider) -> Transport:
        injected = self._injected_transports.get(provider)
        if injected is not None:
            return injected
        http_session = self._external_session
        if http_session is None:
            http_session = aiohttp.ClientSession()
            self._owned_sessions.append(http_session)
        digest_auth = None
        if provider is Provider.MPK:
            digest_auth = (self._config.mpk_username, self._config.mpk_password)
        return HttpTransport(self._config, http_session, provider, digest_auth=digest_auth)

    # ------------------------------------------------------------------
    # Provider access
    # ------------------------------------------------------------------

    @property
    def config(self) -> TransitConfig:
        return self._config

    @property
    def sims(self) -> SimsSource:
        """SiMS adapter, for stops and timetables."""
        if self._sims is None:
            raise TransitError("Client not initialized. Use 'async with TransitClient(...) as client:'")
        return self._sims

    @property
    def mpk(self) -> MpkSource:
        """MPK adapter, for stop info, courses and post plates."""
        if self._mpk is None:
            raise TransitError("Client not initialized. Use 'async with TransitClient(...) as client:'")
        return self._mpk

    def source(self, provider: Provider) -> PositionSource:
        sources: dict[Provider, PositionSource] = {Provider.SIMS: self.sims, Provider.MPK: self.mpk}
        return sources[provider]

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    async def _fetch_isolated(self, source: PositionSource, query: Query) -> FetchResult:
        """Run one adapter, turning its failure into a result annotation."""
        try:
            return await source.fetch(query)
        except TransitError as exc:
            _logger.warning("Provider %s failed: %s", source.provider.value, exc)
            return FetchResult.failed(ProviderFailure(source.provider, exc, source.provider.value))

    async def get_positions(self, query: Query | None = None) -> FetchResult:
        """Fetch vehicle positions from the providers *query* selects.

        A single-provider query propagates that provider's error. With
        several providers, they are fetched concurrently and a failing
        provider degrades the call to a partial result.

        Raises
        ------
        TransitFetchError, TransitTimeoutError, TransitParseError
            Single-provider query whose provider failed.
        TransitPartialFailureError
            ``query.require_all`` is set and anything failed, or every
            selected provider failed.
        """
        if query is None:
            query = Query()
        # Enum order keeps dispatch (and failure order) deterministic.
        selected = [self.source(provider) for provider in Provider if provider in query.providers]

        if len(selected) == 1:
            result = await selected[0].fetch(query)
        else:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(self._fetch_isolated(source, query)) for source in selected]
            result = FetchResult.merge(*(task.result() for task in tasks))

        if not result.succeeded:
            raise TransitPartialFailureError(
                "All providers failed: " + "; ".join(str(f) for f in result.failures),
                result=result,
                failures=result.failures,
            )
        if query.require_all and result.failures:
            raise TransitPartialFailureError(
                "Query requires all providers but some failed: " + "; ".join(str(f) for f in result.failures),
                result=result,
                failures=result.failures,
            )
        return result

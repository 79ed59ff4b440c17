"""HTTP transport with error mapping and optional Digest authentication."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pympk.config import TransitConfig
from pympk.exceptions import TransitFetchError, TransitParseError, TransitTimeoutError
from pympk.models.position import Provider

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        ...


class HttpTransport:
    """aiohttp-backed transport for a single provider.

    Every request is made inside ``async with``, so the pooled connection
    goes back to the connector whether the call succeeds, fails, times out
    or is cancelled.
    """

    def __init__(
        self,
        config: TransitConfig,
        http_session: aiohttp.ClientSession,
        provider: Provider,
        *,
        digest_auth: tuple[str, str] | None = None,
    ) -> None:
        self._config = config
        self._http = http_session
        self._provider = provider
        self._middlewares: tuple[aiohttp.DigestAuthMiddleware, ...] = ()
        if digest_auth is not None:
            login, password = digest_auth
            self._middlewares = (aiohttp.DigestAuthMiddleware(login=login, password=password),)

    @property
    def provider(self) -> Provider:
        return self._provider

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """GET *url* and decode the JSON body.

        *timeout* overrides ``config.request_timeout`` for this request.

        Raises
        ------
        TransitTimeoutError
            The request exceeded its timeout.
        TransitFetchError
            Connectivity failure or non-2xx status.
        TransitParseError
            The body is not UTF-8 encoded JSON.
        """
        total = timeout if timeout is not None else self._config.request_timeout
        headers = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }

        _logger.debug("GET %s params=%s", url, dict(params or {}))

        try:
            async with self._http.get(
                url,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=total),
                middlewares=self._middlewares,
            ) as resp:
                body = await resp.read()
                if resp.status // 100 != 2:
                    raise TransitFetchError(
                        f"HTTP {resp.status} from {url}: {body[:200].decode('utf-8', errors='replace')}",
                        provider=self._provider,
                        status_code=resp.status,
                        endpoint=url,
                    )
        except TransitFetchError:
            raise
        except TimeoutError as exc:
            raise TransitTimeoutError(
                f"Request to {url} timed out after {total}s",
                provider=self._provider,
                endpoint=url,
            ) from exc
        except aiohttp.ClientError as exc:
            raise TransitFetchError(
                f"Request to {url} failed: {exc}",
                provider=self._provider,
                endpoint=url,
            ) from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TransitParseError(
                f"Invalid JSON from {url}: {body[:200]!r}",
                provider=self._provider,
                endpoint=url,
            ) from exc

"""Custom exception hierarchy for pympk."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pympk.models.position import Provider
    from pympk.models.result import FetchResult, ProviderFailure


class TransitError(Exception):
    """Base exception for all pympk errors."""


class TransitConfigError(TransitError):
    """Invalid or missing configuration."""


class TransitFetchError(TransitError):
    """HTTP-level failure (connectivity, DNS, TLS, non-2xx status)."""

    def __init__(
        self,
        message: str,
        *,
        provider: Provider | None = None,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


NetworkError = TransitFetchError


class TransitTimeoutError(TransitFetchError, TimeoutError):
    """The request did not complete before its deadline."""


class TransitApiError(TransitFetchError):
    """The upstream answered with an application-level error object.

    MPK reports failures as ``{"info": ..., "message": ..., "stackTrace": ...}``
    with a 200 status, so these never show up as HTTP errors.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Provider | None = None,
        endpoint: str = "",
        info: str = "",
        stack_trace: str = "",
    ) -> None:
        self.info = info
        self.stack_trace = stack_trace
        super().__init__(message, provider=provider, endpoint=endpoint)


class TransitParseError(TransitError):
    """Response body was not JSON or did not match the expected schema."""

    def __init__(
        self,
        message: str,
        *,
        provider: Provider | None = None,
        endpoint: str = "",
    ) -> None:
        self.provider = provider
        self.endpoint = endpoint
        super().__init__(message)


class TransitPartialFailureError(TransitError):
    """At least one provider failed during a multi-provider query.

    Raised when the caller asked for all-or-nothing semantics
    (``Query.require_all``), or when every selected provider failed.
    ``result`` still carries whatever data did arrive.
    """

    def __init__(
        self,
        message: str,
        *,
        result: FetchResult,
        failures: tuple[ProviderFailure, ...],
    ) -> None:
        self.result = result
        self.failures = failures
        super().__init__(message)


# Errors a single upstream request can end in; both carry ``endpoint``.
UpstreamError = TransitFetchError | TransitParseError

"""Client configuration for pympk."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pympk._constants import (
    DEFAULT_TIME_ZONE,
    MPK_BASE_URL,
    MPK_PASSWORD,
    MPK_USERNAME,
    SIMS_BASE_URLS,
    USER_AGENT,
)
from pympk.exceptions import TransitConfigError


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise TransitConfigError(f"{key} must be a number, got {value!r}") from exc


def _split_urls(value: str) -> tuple[str, ...]:
    return tuple(part.strip().rstrip("/") for part in value.split(",") if part.strip())


@dataclasses.dataclass(frozen=True)
class TransitConfig:
    """Client configuration.

    Parameters
    ----------
    sims_base_urls : tuple[str, ...]
        SiMS API hosts. Every host serves the same schema for a different
        operator; all of them are queried for each request.
    mpk_base_url : str
        MPK mobile API endpoint.
    mpk_username : str
        Digest auth user for the MPK API.
    mpk_password : str
        Digest auth password for the MPK API.
    request_timeout : float
        Default per-provider deadline in seconds. A ``Query.timeout``
        overrides it for a single call.
    clock_skew_tolerance : float
        How far in the future (seconds) an observation timestamp may be
        before the record is rejected.
    mpk_positions_lookback : float
        MPK ``getPositions`` returns vehicles reported since a given date;
        this is how many seconds before *now* that date is.
    time_zone : str
        IANA time zone the MPK API uses for its naive datetimes.
    user_agent : str
        User-Agent header sent with every request.
    """

    sims_base_urls: tuple[str, ...] = SIMS_BASE_URLS
    mpk_base_url: str = MPK_BASE_URL
    mpk_username: str = MPK_USERNAME
    mpk_password: str = MPK_PASSWORD
    request_timeout: float = 10.0
    clock_skew_tolerance: float = 120.0
    mpk_positions_lookback: float = 10.0
    time_zone: str = DEFAULT_TIME_ZONE
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if not self.sims_base_urls:
            raise TransitConfigError("At least one SiMS base URL is required")
        if self.request_timeout <= 0:
            raise TransitConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.clock_skew_tolerance < 0:
            raise TransitConfigError(f"clock_skew_tolerance must not be negative, got {self.clock_skew_tolerance}")
        if self.mpk_positions_lookback < 0:
            raise TransitConfigError(
                f"mpk_positions_lookback must not be negative, got {self.mpk_positions_lookback}"
            )
        try:
            ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise TransitConfigError(f"Unknown time zone {self.time_zone!r}") from exc

    @property
    def zone(self) -> ZoneInfo:
        """MPK local time zone."""
        return ZoneInfo(self.time_zone)

    @classmethod
    def from_env(cls, **overrides: Any) -> TransitConfig:
        """Create configuration from environment variables.

        Reads optional ``PYMPK_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TransitConfig
            Populated configuration.

        Raises
        ------
        TransitConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "PYMPK_MPK_BASE_URL": "mpk_base_url",
            "PYMPK_MPK_USERNAME": "mpk_username",
            "PYMPK_MPK_PASSWORD": "mpk_password",
            "PYMPK_TIME_ZONE": "time_zone",
            "PYMPK_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        urls_env = env.get("PYMPK_SIMS_BASE_URLS")
        if urls_env is not None and "sims_base_urls" not in overrides:
            config_kwargs["sims_base_urls"] = _split_urls(urls_env)

        # Numeric fields are parsed separately so a typo fails loudly.
        _ENV_FLOAT_MAP = {
            "PYMPK_REQUEST_TIMEOUT": "request_timeout",
            "PYMPK_CLOCK_SKEW_TOLERANCE": "clock_skew_tolerance",
            "PYMPK_MPK_POSITIONS_LOOKBACK": "mpk_positions_lookback",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            if field_name in overrides:
                continue
            parsed = _env_float(env, env_key)
            if parsed is not None:
                config_kwargs[field_name] = parsed

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

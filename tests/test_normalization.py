from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from pympk._api.mpk import positions_since
from pympk._constants import SIMS_BASE_URLS
from pympk._normalize import (
    initial_bearing,
    normalize_timestamp_seconds,
    parse_epoch,
    parse_local_datetime,
    safe_float,
    safe_int,
)
from pympk.config import TransitConfig
from pympk.exceptions import TransitConfigError


def test_safe_float_placeholders() -> None:
    assert safe_float("--") is None
    assert safe_float("") is None
    assert safe_float("nan") is None
    assert safe_float("12.5") == 12.5
    assert safe_int("7.9") == 7
    assert safe_float(float("inf")) is None
    assert safe_int(float("-inf")) is None


def test_timestamp_milliseconds_normalized_to_seconds() -> None:
    assert normalize_timestamp_seconds(1740159556672) == pytest.approx(1740159556.672)
    assert normalize_timestamp_seconds(1740159556) == 1740159556
    assert normalize_timestamp_seconds(0) is None
    assert normalize_timestamp_seconds("") is None


def test_parse_epoch_passes_through_unparseable() -> None:
    assert parse_epoch("soon") == "soon"
    assert parse_epoch(1740174780000) == datetime.fromtimestamp(1740174780, tz=UTC)
    assert parse_epoch(float("inf")) == float("inf")


def test_parse_epoch_out_of_range() -> None:
    with pytest.raises(ValueError):
        parse_epoch(1e30)


def test_parse_local_datetime_winter() -> None:
    parsed = parse_local_datetime("2025-02-26 23:38:00", ZoneInfo("Europe/Warsaw"))
    assert parsed == datetime(2025, 2, 26, 22, 38, tzinfo=UTC)


def test_parse_local_datetime_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_local_datetime("19 00-01-01 23:51:00", ZoneInfo("Europe/Warsaw"))


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        ((51.0, 17.0), (51.1, 17.0), 0.0),
        ((51.0, 17.0), (51.0, 17.1), pytest.approx(90.0, abs=0.1)),
        ((51.1, 17.0), (51.0, 17.0), 180.0),
        ((51.0, 17.1), (51.0, 17.0), pytest.approx(270.0, abs=0.1)),
    ],
)
def test_initial_bearing(start: tuple[float, float], end: tuple[float, float], expected: object) -> None:
    assert initial_bearing(*start, *end) == expected


def test_initial_bearing_stationary() -> None:
    assert initial_bearing(51.0, 17.0, 51.0, 17.0) is None


def test_initial_bearing_non_finite() -> None:
    assert initial_bearing(float("inf"), 17.0, 51.0, 17.0) is None
    assert initial_bearing(51.0, 17.0, 51.0, float("nan")) is None


def test_positions_since_uses_local_time() -> None:
    config = TransitConfig(mpk_positions_lookback=10)
    now = datetime(2025, 2, 21, 17, 40, 0, tzinfo=UTC)
    assert positions_since(config, now) == "2025-02-21 18:39:50"


def test_config_defaults() -> None:
    config = TransitConfig()
    assert config.sims_base_urls == SIMS_BASE_URLS
    assert config.zone == ZoneInfo("Europe/Warsaw")


def test_config_rejects_bad_values() -> None:
    with pytest.raises(TransitConfigError):
        TransitConfig(request_timeout=0)
    with pytest.raises(TransitConfigError):
        TransitConfig(sims_base_urls=())
    with pytest.raises(TransitConfigError):
        TransitConfig(time_zone="Mars/Olympus_Mons")


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYMPK_SIMS_BASE_URLS", "https://one.test/, https://two.test")
    monkeypatch.setenv("PYMPK_REQUEST_TIMEOUT", "3.5")
    monkeypatch.setenv("PYMPK_MPK_USERNAME", "someone")

    config = TransitConfig.from_env(clock_skew_tolerance=5)

    assert config.sims_base_urls == ("https://one.test", "https://two.test")
    assert config.request_timeout == 3.5
    assert config.mpk_username == "someone"
    assert config.clock_skew_tolerance == 5


def test_config_from_env_override_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYMPK_REQUEST_TIMEOUT", "3.5")
    assert TransitConfig.from_env(request_timeout=1.0).request_timeout == 1.0


def test_config_from_env_invalid_number(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYMPK_REQUEST_TIMEOUT", "fast")
    with pytest.raises(TransitConfigError):
        TransitConfig.from_env()

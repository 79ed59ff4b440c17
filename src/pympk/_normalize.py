"""Normalization helpers.

Centralizes defensive parsing and placeholder handling shared by the
provider wire models and the position mapping.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime, tzinfo
from typing import Any

from pympk._constants import SQL_DATE_FORMAT


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def empty_string_as_none(value: Any) -> Any:
    """Map ``""`` (and whitespace-only strings) to ``None``; pass anything else through."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def strip_string(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


def normalize_timestamp_seconds(value: Any) -> float | None:
    """Normalize API timestamps to epoch seconds.

    - Empty/missing -> None
    - <= 0 -> None
    - Milliseconds (> 1e11) -> seconds
    """

    if value is None or value == "":
        return None
    try:
        ts = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(ts) or ts <= 0:
        return None
    if ts > 1e11:
        ts /= 1000.0
    return ts


def parse_epoch(value: Any) -> Any:
    """Convert an epoch timestamp (seconds or milliseconds) to a UTC datetime.

    Values that are already datetimes pass through; anything unparseable is
    returned unchanged so the model validator can reject it.
    """
    if isinstance(value, datetime):
        return value
    ts = normalize_timestamp_seconds(value)
    if ts is None:
        return value
    try:
        return datetime.fromtimestamp(ts, tz=UTC)
    except (OverflowError, OSError) as exc:
        raise ValueError(f"timestamp {value!r} is out of range") from exc


def parse_local_datetime(value: str, zone: tzinfo) -> datetime:
    """Parse an MPK ``YYYY-MM-DD HH:MM:SS`` local datetime into UTC.

    Raises :class:`ValueError` when the text does not match the format.
    """
    naive = datetime.strptime(value.strip(), SQL_DATE_FORMAT)
    return naive.replace(tzinfo=zone).astimezone(UTC)


def format_local_datetime(moment: datetime, zone: tzinfo) -> str:
    return moment.astimezone(zone).strftime(SQL_DATE_FORMAT)


def initial_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float | None:
    """Initial great-circle bearing in degrees ``[0, 360)`` from point 1 to point 2.

    Returns ``None`` when the points coincide or any coordinate is not finite.
    """
    if not all(math.isfinite(c) for c in (lat1, lon1, lat2, lon2)):
        return None
    if lat1 == lat2 and lon1 == lon2:
        return None
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lon2 - lon1)
    x = math.sin(d_lambda) * math.cos(phi2)
    y = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    bearing = math.degrees(math.atan2(x, y)) % 360.0
    # -0.0 % 360 can round to 360.0 for tiny negative values.
    return 0.0 if bearing >= 360.0 else bearing


def normalize_line(value: str) -> str:
    return value.strip().casefold()

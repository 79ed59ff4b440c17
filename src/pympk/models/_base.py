"""Base model and enum for provider API responses.

Every wire model inherits from :class:`TransitBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips placeholder values
  (``""``, ``"--"``, NaN) so the field default is used.
* A ``raw`` dict that captures the original payload.

Value enums inherit from :class:`TransitEnum` which adds an ``UNKNOWN``
member and a ``_missing_`` hook that returns ``UNKNOWN`` for any value
without a mapped member.
"""

from __future__ import annotations

import enum
import math
from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from pympk._normalize import empty_string_as_none, parse_epoch, safe_float, safe_int, strip_string

# Placeholder strings the upstream APIs use for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan"})


def _require_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return value


EpochTimestamp = Annotated[datetime, BeforeValidator(parse_epoch), AfterValidator(_require_aware)]
"""Annotated type that coerces epoch ints (seconds or ms) to UTC datetimes."""

OptionalText = Annotated[str | None, BeforeValidator(empty_string_as_none)]
"""String field where an empty string means "absent"."""

StrippedText = Annotated[str, BeforeValidator(strip_string)]

OptionalFloat = Annotated[float | None, BeforeValidator(safe_float)]
"""Optional number; unparseable values become ``None`` instead of failing the record."""

OptionalInt = Annotated[int | None, BeforeValidator(safe_int)]


class TransitEnum(enum.StrEnum):
    """Base for provider value enums.

    Every subclass **must** define ``UNKNOWN``. Values without a mapped
    member resolve to ``UNKNOWN`` instead of raising ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> TransitEnum:
        if isinstance(value, str):
            folded = value.strip().casefold()
            for member in cls:
                if member.value.casefold() == folded:
                    return member
        unknown: TransitEnum = cls["UNKNOWN"]
        return unknown


class TransitBaseModel(BaseModel):
    """Base for provider wire models.

    Handles:
    * camelCase -> snake_case via ``alias_generator=to_camel``
    * placeholder values (``""``, ``"--"``, NaN) -> dropped so the
      field default is used instead
    * Stashes the original API dict in ``raw``
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        coerce_numbers_to_str=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)
    """Original API response dict."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip placeholder values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = TransitBaseModel._clean_dict(original)

        # Only auto-stash raw when not explicitly provided (i.e. model_validate
        # from an API dict).
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned

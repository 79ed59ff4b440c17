"""Shared helpers for provider endpoint modules.

This module centralizes the most repeated patterns:
- validating decoded JSON into wire models
- mapping pydantic validation errors to ``TransitParseError``

It is internal to pympk and may change at any time.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from pympk.exceptions import TransitParseError
from pympk.models.position import Provider

TModel = TypeVar("TModel", bound=BaseModel)


def parse_model(
    model: type[TModel],
    payload: Any,
    *,
    provider: Provider,
    endpoint: str,
) -> TModel:
    """Validate *payload* as *model*, raising ``TransitParseError`` on mismatch."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise TransitParseError(
            f"{endpoint} returned an unexpected {model.__name__} payload: {exc}",
            provider=provider,
            endpoint=endpoint,
        ) from exc


def parse_model_list(
    model: type[TModel],
    payload: Any,
    *,
    provider: Provider,
    endpoint: str,
) -> list[TModel]:
    """Validate a JSON array of *model* items."""
    if not isinstance(payload, list):
        raise TransitParseError(
            f"{endpoint} returned {type(payload).__name__}, expected a list",
            provider=provider,
            endpoint=endpoint,
        )
    try:
        return TypeAdapter(list[model]).validate_python(payload)  # type: ignore[valid-type]
    except ValidationError as exc:
        raise TransitParseError(
            f"{endpoint} returned an unexpected {model.__name__} list: {exc}",
            provider=provider,
            endpoint=endpoint,
        ) from exc

"""Per-call query parameters."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pympk._normalize import normalize_line
from pympk.models.position import BoundingBox, Provider, VehiclePosition, VehicleType


class Query(BaseModel):
    """Filter and dispatch options for :meth:`pympk.TransitClient.get_positions`.

    Parameters
    ----------
    lines : frozenset[str] or None
        Only return vehicles serving one of these lines. Matching ignores
        case and surrounding whitespace. ``None`` disables the filter.
    bbox : BoundingBox or None
        Only return vehicles inside this rectangle.
    providers : frozenset[Provider]
        Which providers to ask. Defaults to all of them.
    vehicle_types : frozenset[VehicleType] or None
        Only return these kinds of vehicle.
    require_all : bool
        All-or-nothing: raise instead of returning a partial result when
        any provider (or SiMS host) fails.
    timeout : float or None
        Per-provider deadline in seconds, overriding the configured default.
    """

    model_config = ConfigDict(frozen=True)

    lines: frozenset[str] | None = None
    bbox: BoundingBox | None = None
    providers: frozenset[Provider] = frozenset(Provider)
    vehicle_types: frozenset[VehicleType] | None = None
    require_all: bool = False
    timeout: float | None = Field(default=None, gt=0)

    @field_validator("lines", mode="before")
    @classmethod
    def _normalize_lines(cls, value: object) -> object:
        if value is None or isinstance(value, str):
            # A bare string is a single line, not an iterable of characters.
            return None if value is None else frozenset({normalize_line(value)})
        if isinstance(value, Iterable):
            return frozenset(normalize_line(str(item)) for item in value)
        return value

    @field_validator("providers", mode="before")
    @classmethod
    def _coerce_providers(cls, value: object) -> object:
        if isinstance(value, (str, Provider)):
            return frozenset({Provider(value)})
        return value

    @field_validator("providers")
    @classmethod
    def _require_providers(cls, value: frozenset[Provider]) -> frozenset[Provider]:
        if not value:
            raise ValueError("at least one provider must be selected")
        return value

    @classmethod
    def for_provider(cls, provider: Provider, **kwargs: object) -> Query:
        return cls(providers=frozenset({provider}), **kwargs)

    def matches(self, position: VehiclePosition) -> bool:
        """Apply the line, bounding box and vehicle type filters."""
        if self.lines is not None:
            if position.line is None or normalize_line(position.line) not in self.lines:
                return False
        if self.bbox is not None and not self.bbox.contains(position.latitude, position.longitude):
            return False
        return self.vehicle_types is None or position.vehicle_type in self.vehicle_types

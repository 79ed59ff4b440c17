"""Aggregated fetch results and failure annotations."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from pympk.exceptions import TransitError
from pympk.models.position import Provider, VehiclePosition


@dataclass(frozen=True, slots=True)
class ProviderFailure:
    """A non-fatal error attached to a partial result.

    ``source`` names what failed: a SiMS host URL, or the provider name
    when the whole adapter call failed.
    """

    provider: Provider
    error: TransitError
    source: str = ""

    def __str__(self) -> str:
        where = f" ({self.source})" if self.source else ""
        return f"{self.provider.value}{where}: {self.error}"


def _freeze_counts(counts: Mapping[Provider, int]) -> Mapping[Provider, int]:
    return MappingProxyType({provider: count for provider, count in counts.items() if count})


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Snapshot of vehicle positions plus any failures met while collecting it.

    ``positions`` is always sorted by ``(provider, vehicle_id, observed_at)``
    so identical upstream data yields identical results.
    ``rejected`` counts records per provider that parsed but broke a
    :class:`VehiclePosition` invariant (bad coordinates, future timestamp).
    """

    positions: tuple[VehiclePosition, ...] = ()
    failures: tuple[ProviderFailure, ...] = ()
    rejected: Mapping[Provider, int] = field(default_factory=dict)
    succeeded: frozenset[Provider] = frozenset()

    # Compared by value, but not hashable: ``rejected`` is a mapping.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "positions", tuple(sorted(self.positions, key=lambda p: p.sort_key)))
        object.__setattr__(self, "rejected", _freeze_counts(self.rejected))

    @classmethod
    def build(
        cls,
        provider: Provider,
        positions: Iterable[VehiclePosition],
        *,
        failures: Iterable[ProviderFailure] = (),
        rejected: int = 0,
    ) -> FetchResult:
        return cls(
            positions=tuple(positions),
            failures=tuple(failures),
            rejected={provider: rejected},
            succeeded=frozenset({provider}),
        )

    @classmethod
    def failed(cls, failure: ProviderFailure) -> FetchResult:
        return cls(failures=(failure,))

    @classmethod
    def merge(cls, *results: FetchResult) -> FetchResult:
        rejected: dict[Provider, int] = {}
        for result in results:
            for provider, count in result.rejected.items():
                rejected[provider] = rejected.get(provider, 0) + count
        return cls(
            positions=tuple(p for r in results for p in r.positions),
            failures=tuple(f for r in results for f in r.failures),
            rejected=rejected,
            succeeded=frozenset().union(*(r.succeeded for r in results)),
        )

    @property
    def is_partial(self) -> bool:
        """Some data arrived but at least one provider or host failed."""
        return bool(self.failures) and bool(self.succeeded)

    @property
    def failed_providers(self) -> frozenset[Provider]:
        """Providers that contributed no data at all."""
        return frozenset(f.provider for f in self.failures) - self.succeeded

    def for_provider(self, provider: Provider) -> tuple[VehiclePosition, ...]:
        return tuple(p for p in self.positions if p.provider is provider)

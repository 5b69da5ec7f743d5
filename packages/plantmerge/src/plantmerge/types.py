"""Core types for the plantmerge reconciliation system."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal

DataSource = Literal["authoritative", "research", "manual"]

# Display order for data source tags
SOURCE_ORDER: tuple[DataSource, ...] = ("authoritative", "research", "manual")

MatchTier = Literal["exact", "alias", "normalized", "containment"]


@dataclass
class GeneratorRecord:
    """One generator row from an authoritative filing snapshot."""

    facility_id: int
    generator_id: str
    report_date: date | None
    capacity_mw: float | None
    fuel_type: str | None
    operational_status: str | None
    planned_retirement_date: date | None
    actual_retirement_date: date | None


@dataclass
class FacilityInfo:
    name: str
    state: str
    county: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass
class FacilityRecord:
    """Authoritative generator joined with its facility."""

    facility_id: int
    facility_name: str
    generator_id: str
    state: str
    capacity_mw: float | None
    fuel_type: str | None
    operational_status: str | None
    planned_retirement_date: date | None
    actual_retirement_date: date | None
    county: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass
class ResearchUnit:
    """One unit from the research wiki. Year granularity only."""

    facility_name: str
    facility_slug: str
    unit_name: str
    status: str
    fuel_type: str
    capacity_mw: float | None
    planned_retirement_year: int | None
    actual_retirement_year: int | None
    state: str
    county: str | None = None
    owner: str | None = None

    @property
    def is_retired(self) -> bool:
        return self.actual_retirement_year is not None or "retired" in self.status.lower()


@dataclass(frozen=True)
class DelayCitation:
    """A hand-curated retirement delay backed by a news or regulatory source.

    ``delay_years`` is None whenever the delay is unbounded (indefinite or
    under an emergency order).
    """

    facility_name: str
    state: str
    original_year: int
    operator: str | None = None
    revised_year: int | None = None
    delay_years: int | None = None
    indefinite: bool = False
    emergency_order: bool = False
    source_label: str = ""
    source_url: str | None = None


@dataclass
class MergedRecord:
    """One reconciled generator with provenance and delay information."""

    facility_name: str
    state: str
    data_sources: frozenset[str]
    facility_id: int | None = None
    generator_id: str | None = None
    unit_name: str | None = None
    county: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    capacity_mw: float | None = None
    fuel_type: str | None = None
    operational_status: str | None = None
    owner: str | None = None
    resolved_planned_date: date | None = None
    authoritative_date: date | None = None
    research_date: date | None = None
    delay_months: int | None = None
    delay_years: int | None = None
    original_planned_year: int | None = None
    revised_planned_year: int | None = None
    indefinite_delay: bool = False
    emergency_order: bool = False
    extended: bool = False
    source_label: str | None = None
    source_url: str | None = None

    def __post_init__(self) -> None:
        if not self.data_sources:
            raise ValueError("MergedRecord needs at least one data source")
        unknown = set(self.data_sources) - set(SOURCE_ORDER)
        if unknown:
            raise ValueError(f"unknown data sources: {sorted(unknown)}")
        if not self.facility_name:
            raise ValueError("MergedRecord needs a facility name")

    @property
    def unit_label(self) -> str | None:
        return self.generator_id if self.generator_id is not None else self.unit_name

    def to_dict(self) -> dict[str, Any]:
        """Serialize with every key present; absent values are None."""
        return {
            "facilityId": self.facility_id,
            "facilityName": self.facility_name,
            "generatorId": self.generator_id,
            "unitName": self.unit_name,
            "state": self.state,
            "county": self.county,
            "city": self.city,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "capacityMw": self.capacity_mw,
            "fuelType": self.fuel_type,
            "operationalStatus": self.operational_status,
            "owner": self.owner,
            "dataSources": [s for s in SOURCE_ORDER if s in self.data_sources],
            "resolvedPlannedDate": _iso(self.resolved_planned_date),
            "authoritativeDate": _iso(self.authoritative_date),
            "researchDate": _iso(self.research_date),
            "delayMonths": self.delay_months,
            "delayYears": self.delay_years,
            "originalPlannedYear": self.original_planned_year,
            "revisedPlannedYear": self.revised_planned_year,
            "indefiniteDelay": self.indefinite_delay,
            "emergencyOrder": self.emergency_order,
            "extended": self.extended,
            "sourceLabel": self.source_label,
            "sourceUrl": self.source_url,
        }


@dataclass
class RetirementFilters:
    state: str = ""
    fuel_type: str = ""
    page: int = 1


@dataclass
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit > 0 else 0

    def to_dict(self) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


@dataclass
class RetirementPage:
    data: list[MergedRecord]
    pagination: Pagination

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [r.to_dict() for r in self.data],
            "pagination": self.pagination.to_dict(),
        }


@dataclass
class RetirementSummary:
    record_count: int = 0
    total_capacity_mw: float = 0.0
    extended_count: int = 0
    unbounded_delay_count: int = 0
    by_source: dict[str, int] = field(default_factory=lambda: {
        "authoritative": 0, "research": 0, "manual": 0
    })

    def to_dict(self) -> dict[str, Any]:
        return {
            "recordCount": self.record_count,
            "totalCapacityMw": round(self.total_capacity_mw, 1),
            "extendedCount": self.extended_count,
            "unboundedDelayCount": self.unbounded_delay_count,
            "bySource": dict(self.by_source),
        }


@dataclass
class ResearchMatch:
    """A research facility group matched to an authoritative generator."""

    tier: MatchTier
    group_keys: list[tuple[str, str]]
    units: list[ResearchUnit]
    unit: ResearchUnit
    unit_fallback: bool = False


def _iso(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None

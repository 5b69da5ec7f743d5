"""Merge engine: combine matched sources into one record per generator.

Dates from the research source are year-end approximations. Resolution
order for the planned retirement date:

1. the later of the authoritative and research dates;
2. a manual citation's revised year, unconditionally;
3. for an indefinite or emergency-order citation with nothing else known,
   the citation's original year.

Delay shown on a record comes from the citation when it has one, else from
the gap between the authoritative and research dates. Only strictly
positive delays are reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

import structlog

from plantmerge.aliases import AliasTable
from plantmerge.config import MergeConfig
from plantmerge.filters import authoritative_passes, research_passes
from plantmerge.index import ResearchIndex
from plantmerge.manual_delays import ManualDelayIndex
from plantmerge.matcher import Matcher, MatcherStats, UnitSelector, select_unit
from plantmerge.normalize import normalize
from plantmerge.types import (
    DelayCitation,
    FacilityRecord,
    MergedRecord,
    ResearchUnit,
    RetirementFilters,
)

log = structlog.get_logger()


def year_end(year: int) -> date:
    return date(year, 12, 31)


def months_between(earlier: date, later: date) -> int:
    """Whole calendar months from ``earlier`` to ``later``."""
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


@dataclass
class DelayResolution:
    resolved_planned_date: date | None = None
    delay_months: int | None = None
    delay_years: int | None = None
    original_planned_year: int | None = None
    revised_planned_year: int | None = None
    indefinite_delay: bool = False
    emergency_order: bool = False
    extended: bool = False


def resolve_dates(
    authoritative_date: date | None,
    research_date: date | None,
    citation: DelayCitation | None = None,
) -> DelayResolution:
    """Resolve the planned date and delay for one generator.

    The delay between two dates counts whole calendar months and ignores
    days. Research dates are year-end approximations, so two distinct dates
    in the same month (2028-12-15 and 2028-12-31) carry no delay and
    ``delay_months`` stays None even though the dates differ.
    """
    res = DelayResolution()
    known = [d for d in (authoritative_date, research_date) if d is not None]
    base = max(known) if known else None
    res.resolved_planned_date = base

    cross_months: int | None = None
    if authoritative_date and research_date and authoritative_date != research_date:
        earlier, later = sorted((authoritative_date, research_date))
        months = months_between(earlier, later)
        if months > 0:
            cross_months = months
            res.original_planned_year = earlier.year
            res.revised_planned_year = later.year
    res.delay_months = cross_months

    override_months: int | None = None
    if citation is not None:
        if citation.revised_year is not None:
            res.resolved_planned_date = year_end(citation.revised_year)
            if base is not None:
                override_months = months_between(base, res.resolved_planned_date)
        elif (citation.indefinite or citation.emergency_order) and base is None:
            res.resolved_planned_date = year_end(citation.original_year)

        cited_years = citation.delay_years
        if cited_years is None and citation.revised_year is not None:
            cited_years = citation.revised_year - citation.original_year
        if cited_years is not None and cited_years > 0:
            res.delay_years = cited_years
            res.delay_months = cited_years * 12

        # A citation without a revised year keeps the cross-source years
        if citation.revised_year is not None or res.revised_planned_year is None:
            res.original_planned_year = citation.original_year
            res.revised_planned_year = citation.revised_year
        res.indefinite_delay = citation.indefinite
        res.emergency_order = citation.emergency_order

    res.extended = (
        (res.delay_months is not None and res.delay_months > 0)
        or (override_months is not None and override_months > 0)
        or res.indefinite_delay
        or res.emergency_order
    )
    return res


@dataclass
class MergeStats:
    """Statistics collected during one merge run."""

    authoritative_in: int = 0
    research_in: int = 0
    filtered_out: int = 0
    skipped_retired: int = 0
    dropped_missing_identity: int = 0
    dropped_no_signal: int = 0
    matched: int = 0
    research_only: int = 0
    citations_applied: int = 0
    matcher: MatcherStats = field(default_factory=MatcherStats)


@dataclass
class MergeResult:
    records: list[MergedRecord]
    stats: MergeStats


class MergeEngine:
    """Stateless reconciliation of authoritative, research and manual data.

    The alias table and manual delay index are read-only; each call to
    ``run`` builds its own research index and matcher, so one engine can be
    shared across concurrent requests.
    """

    def __init__(
        self,
        aliases: AliasTable | None = None,
        manual_delays: ManualDelayIndex | None = None,
        config: MergeConfig | None = None,
        unit_selector: UnitSelector = select_unit,
    ) -> None:
        self.config = config or MergeConfig()
        self.aliases = aliases if aliases is not None else AliasTable()
        self.manual_delays = (
            manual_delays
            if manual_delays is not None
            else ManualDelayIndex(config=self.config.normalization)
        )
        self.unit_selector = unit_selector

    def merge(
        self,
        facilities: list[FacilityRecord],
        research_units: list[ResearchUnit],
        filters: RetirementFilters | None = None,
    ) -> list[MergedRecord]:
        return self.run(facilities, research_units, filters).records

    def run(
        self,
        facilities: list[FacilityRecord],
        research_units: list[ResearchUnit],
        filters: RetirementFilters | None = None,
    ) -> MergeResult:
        stats = MergeStats(
            authoritative_in=len(facilities),
            research_in=len(research_units),
        )
        fc = self.config.filters

        # Filters go first to bound the matching search space
        facilities_kept = [f for f in facilities if authoritative_passes(f, filters, fc)]
        units_kept = [u for u in research_units if research_passes(u, filters, fc)]
        stats.filtered_out = (
            len(facilities) - len(facilities_kept) + len(research_units) - len(units_kept)
        )

        index = ResearchIndex(self.config.normalization)
        index.build(units_kept)
        stats.dropped_missing_identity += index.skipped

        matcher = Matcher(self.aliases, self.config.normalization, self.unit_selector)
        stats.matcher = matcher.stats

        log.info(
            "merge_start",
            authoritative=len(facilities_kept),
            research=len(units_kept),
            research_groups=len(index),
            citations=len(self.manual_delays),
        )

        records: list[MergedRecord] = []
        for facility in facilities_kept:
            record = self._merge_authoritative(facility, index, matcher, stats)
            if record is not None:
                records.append(record)

        for unit in index.unconsumed_units():
            record = self._merge_research_only(unit, stats)
            if record is not None:
                records.append(record)

        log.info(
            "merge_done",
            records=len(records),
            matched=stats.matched,
            research_only=stats.research_only,
            citations_applied=stats.citations_applied,
            dropped_no_signal=stats.dropped_no_signal,
            dropped_missing_identity=stats.dropped_missing_identity,
            match_tiers=matcher.stats.tiers,
            ambiguous=matcher.stats.ambiguous,
        )
        return MergeResult(records=records, stats=stats)

    def _merge_authoritative(
        self,
        facility: FacilityRecord,
        index: ResearchIndex,
        matcher: Matcher,
        stats: MergeStats,
    ) -> MergedRecord | None:
        if facility.actual_retirement_date is not None:
            stats.skipped_retired += 1
            return None
        if not normalize(facility.facility_name, self.config.normalization):
            stats.dropped_missing_identity += 1
            log.debug("drop_missing_identity", facility_id=facility.facility_id)
            return None

        match = matcher.match(facility, index)
        unit = match.unit if match is not None else None
        research_date = None
        if unit is not None and not unit.is_retired and unit.planned_retirement_year is not None:
            research_date = year_end(unit.planned_retirement_year)

        citation = self.manual_delays.lookup(facility.facility_name, facility.state)
        res = resolve_dates(facility.planned_retirement_date, research_date, citation)

        if res.resolved_planned_date is None and citation is None:
            stats.dropped_no_signal += 1
            log.debug(
                "drop_no_signal",
                facility_name=facility.facility_name,
                generator_id=facility.generator_id,
            )
            return None

        sources = {"authoritative"}
        if match is not None:
            sources.add("research")
            stats.matched += 1
        if citation is not None:
            sources.add("manual")
            stats.citations_applied += 1
            log.debug(
                "citation_applied",
                facility_name=facility.facility_name,
                cited_name=citation.facility_name,
                revised_year=citation.revised_year,
            )

        return MergedRecord(
            facility_name=facility.facility_name,
            state=facility.state,
            data_sources=frozenset(sources),
            facility_id=facility.facility_id,
            generator_id=facility.generator_id,
            unit_name=unit.unit_name if unit is not None else None,
            county=facility.county or (unit.county if unit is not None else None),
            city=facility.city,
            latitude=facility.latitude,
            longitude=facility.longitude,
            capacity_mw=facility.capacity_mw,
            fuel_type=facility.fuel_type,
            operational_status=facility.operational_status,
            owner=unit.owner if unit is not None else (citation.operator if citation else None),
            authoritative_date=facility.planned_retirement_date,
            research_date=research_date,
            **_resolution_fields(res),
            **_citation_fields(citation),
        )

    def _merge_research_only(self, unit: ResearchUnit, stats: MergeStats) -> MergedRecord | None:
        if unit.is_retired or unit.planned_retirement_year is None:
            return None

        research_date = year_end(unit.planned_retirement_year)
        citation = self.manual_delays.lookup(unit.facility_name, unit.state)
        res = resolve_dates(None, research_date, citation)

        sources = {"research"}
        if citation is not None:
            sources.add("manual")
            stats.citations_applied += 1
        stats.research_only += 1

        return MergedRecord(
            facility_name=unit.facility_name,
            state=unit.state,
            data_sources=frozenset(sources),
            unit_name=unit.unit_name,
            county=unit.county,
            capacity_mw=unit.capacity_mw,
            fuel_type=unit.fuel_type,
            operational_status=unit.status,
            owner=unit.owner or (citation.operator if citation else None),
            research_date=research_date,
            **_resolution_fields(res),
            **_citation_fields(citation),
        )


def _resolution_fields(res: DelayResolution) -> dict:
    return {
        "resolved_planned_date": res.resolved_planned_date,
        "delay_months": res.delay_months,
        "delay_years": res.delay_years,
        "original_planned_year": res.original_planned_year,
        "revised_planned_year": res.revised_planned_year,
        "indefinite_delay": res.indefinite_delay,
        "emergency_order": res.emergency_order,
        "extended": res.extended,
    }


def _citation_fields(citation: DelayCitation | None) -> dict:
    if citation is None:
        return {"source_label": None, "source_url": None}
    return {"source_label": citation.source_label or None, "source_url": citation.source_url}

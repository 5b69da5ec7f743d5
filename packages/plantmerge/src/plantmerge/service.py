"""Query entry point: fetch, join, merge, dedupe, sort and paginate."""

from __future__ import annotations

import structlog

from plantmerge.config import MergeConfig
from plantmerge.dedupe import dedupe
from plantmerge.engine import MergeEngine
from plantmerge.errors import SourceUnavailable
from plantmerge.pagination import paginate, sort_records
from plantmerge.sources import AuthoritativeSource, ResearchSource
from plantmerge.summary import summarize
from plantmerge.types import (
    FacilityRecord,
    MergedRecord,
    ResearchUnit,
    RetirementFilters,
    RetirementPage,
    RetirementSummary,
)

log = structlog.get_logger()


class RetirementService:
    """Rebuilds the reconciled record set on every query.

    A missing or failing source degrades the result to fewer data sources
    per record; only exceptions other than SourceUnavailable propagate.
    """

    def __init__(
        self,
        authoritative: AuthoritativeSource | None,
        research: ResearchSource | None,
        engine: MergeEngine | None = None,
        config: MergeConfig | None = None,
    ) -> None:
        self.config = config or (engine.config if engine is not None else MergeConfig())
        self.authoritative = authoritative
        self.research = research
        self.engine = engine or MergeEngine(config=self.config)

    def facility_records(self, filters: RetirementFilters) -> list[FacilityRecord]:
        """Latest-snapshot generators joined with their facilities."""
        if self.authoritative is None:
            log.warning("source_unavailable", source="authoritative", reason="not configured")
            return []
        try:
            report_date = self.authoritative.latest_report_date()
            if report_date is None:
                log.warning("source_empty", source="authoritative")
                return []
            generators = self.authoritative.fetch_generators(report_date, filters)
            ids = sorted({g.facility_id for g in generators})
            facilities = self.authoritative.fetch_facilities(ids)
        except SourceUnavailable as e:
            log.warning("source_unavailable", source=e.source, reason=e.reason)
            return []

        records: list[FacilityRecord] = []
        missing = 0
        for g in generators:
            info = facilities.get(g.facility_id)
            if info is None:
                missing += 1
                continue
            if filters.state and info.state != filters.state:
                continue
            records.append(FacilityRecord(
                facility_id=g.facility_id,
                facility_name=info.name,
                generator_id=g.generator_id,
                state=info.state,
                capacity_mw=g.capacity_mw,
                fuel_type=g.fuel_type,
                operational_status=g.operational_status,
                planned_retirement_date=g.planned_retirement_date,
                actual_retirement_date=g.actual_retirement_date,
                county=info.county,
                city=info.city,
                latitude=info.latitude,
                longitude=info.longitude,
            ))
        if missing:
            log.info("generators_without_facility", count=missing)
        log.info(
            "authoritative_fetched",
            report_date=str(report_date),
            generators=len(generators),
            joined=len(records),
        )
        return records

    def research_units(self, filters: RetirementFilters) -> list[ResearchUnit]:
        if self.research is None:
            log.warning("source_unavailable", source="research", reason="not configured")
            return []
        try:
            units = self.research.fetch_research_units(filters)
        except SourceUnavailable as e:
            log.warning("source_unavailable", source=e.source, reason=e.reason)
            return []
        if not units:
            log.warning("source_empty", source="research")
        return units

    def records(self, filters: RetirementFilters) -> list[MergedRecord]:
        """The full merged, deduplicated and sorted record set."""
        merged = self.engine.merge(
            self.facility_records(filters),
            self.research_units(filters),
            filters,
        )
        deduped = dedupe(merged, self.config.dedup, self.config.normalization)
        return sort_records(deduped, self.config.pagination)

    def query(self, filters: RetirementFilters) -> RetirementPage:
        page = paginate(self.records(filters), filters.page, self.config.pagination)
        log.info(
            "query_done",
            state=filters.state or None,
            fuel_type=filters.fuel_type or None,
            page=page.pagination.page,
            total=page.pagination.total,
            returned=len(page.data),
        )
        return page

    def summary(self, filters: RetirementFilters) -> RetirementSummary:
        return summarize(self.records(filters))

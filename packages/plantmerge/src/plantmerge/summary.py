"""Aggregate statistics over merged records."""

from __future__ import annotations

from plantmerge.types import MergedRecord, RetirementSummary


def summarize(records: list[MergedRecord]) -> RetirementSummary:
    summary = RetirementSummary()
    for r in records:
        summary.record_count += 1
        summary.total_capacity_mw += r.capacity_mw or 0.0
        if r.extended:
            summary.extended_count += 1
        if r.indefinite_delay or r.emergency_order:
            summary.unbounded_delay_count += 1
        for source in r.data_sources:
            summary.by_source[source] += 1
    return summary

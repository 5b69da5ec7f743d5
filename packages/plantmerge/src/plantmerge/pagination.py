"""Deterministic ordering and page slicing of merged records."""

from __future__ import annotations

from plantmerge.config import PaginationConfig
from plantmerge.types import MergedRecord, Pagination, RetirementPage


def sort_records(
    records: list[MergedRecord], config: PaginationConfig | None = None
) -> list[MergedRecord]:
    """Order by resolved planned date ascending; undated records go last.

    The sort is stable, so equal dates keep their input order.
    """
    sentinel = (config or PaginationConfig()).null_date_sentinel
    return sorted(
        records,
        key=lambda r: r.resolved_planned_date if r.resolved_planned_date is not None else sentinel,
    )


def paginate(
    records: list[MergedRecord],
    page: int = 1,
    config: PaginationConfig | None = None,
) -> RetirementPage:
    """Slice one 1-indexed page; pages past the end are empty."""
    config = config or PaginationConfig()
    size = config.page_size
    page = max(page, 1)
    start = (page - 1) * size
    return RetirementPage(
        data=records[start:start + size],
        pagination=Pagination(page=page, limit=size, total=len(records)),
    )


def empty_page(page: int = 1, config: PaginationConfig | None = None) -> RetirementPage:
    return paginate([], page, config)

"""Request filter validation and per-source filter predicates."""

from __future__ import annotations

from typing import Any

import structlog

from plantmerge.config import FilterConfig
from plantmerge.types import FacilityRecord, ResearchUnit, RetirementFilters

log = structlog.get_logger()

US_STATES: frozenset[str] = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
    "DC",
})


def validate_state(state: str | None) -> str:
    if not state:
        return ""
    value = state.strip().upper()
    if value not in US_STATES:
        log.info("filter_default_applied", filter="state", value=state, default="")
        return ""
    return value


def validate_fuel_type(fuel_type: str | None, config: FilterConfig | None = None) -> str:
    config = config or FilterConfig()
    if not fuel_type:
        return ""
    value = fuel_type.strip().lower()
    if value not in config.known_fuel_types:
        log.info("filter_default_applied", filter="fuel_type", value=fuel_type, default="")
        return ""
    return value


def validate_page(page: Any, config: FilterConfig | None = None) -> int:
    config = config or FilterConfig()
    if page is None or page == "":
        return config.default_page
    try:
        value = int(page)
    except (TypeError, ValueError):
        log.info("filter_default_applied", filter="page", value=page, default=config.default_page)
        return config.default_page
    if value < 1:
        log.info("filter_default_applied", filter="page", value=page, default=config.default_page)
        return config.default_page
    return value


def validate_filters(
    state: str | None = None,
    fuel_type: str | None = None,
    page: Any = None,
    config: FilterConfig | None = None,
) -> RetirementFilters:
    """Validate raw filter input, substituting defaults for anything unusable."""
    return RetirementFilters(
        state=validate_state(state),
        fuel_type=validate_fuel_type(fuel_type, config),
        page=validate_page(page, config),
    )


def authoritative_passes(
    record: FacilityRecord,
    filters: RetirementFilters | None,
    config: FilterConfig | None = None,
) -> bool:
    """State and exact fuel-code filter for authoritative records."""
    config = config or FilterConfig()
    fuel = (record.fuel_type or "").lower()
    if config.fuel_types_of_interest and fuel not in config.fuel_types_of_interest:
        return False
    if filters is None:
        return True
    if filters.state and record.state != filters.state:
        return False
    if filters.fuel_type and fuel != filters.fuel_type:
        return False
    return True


def research_passes(
    unit: ResearchUnit,
    filters: RetirementFilters | None,
    config: FilterConfig | None = None,
) -> bool:
    """State and case-insensitive substring fuel filter for research units."""
    config = config or FilterConfig()
    fuel = (unit.fuel_type or "").lower()
    if config.fuel_types_of_interest and not any(
        f in fuel for f in config.fuel_types_of_interest
    ):
        return False
    if filters is None:
        return True
    if filters.state and unit.state != filters.state:
        return False
    if filters.fuel_type and filters.fuel_type not in fuel:
        return False
    return True

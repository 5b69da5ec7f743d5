"""plantmerge - Power plant retirement reconciliation."""

from plantmerge.aliases import AliasTable
from plantmerge.config import MergeConfig
from plantmerge.dedupe import dedupe
from plantmerge.engine import MergeEngine, MergeStats
from plantmerge.manual_delays import ManualDelayIndex
from plantmerge.matcher import Matcher, MatcherStats
from plantmerge.normalize import normalize
from plantmerge.pagination import paginate, sort_records
from plantmerge.service import RetirementService
from plantmerge.types import (
    DelayCitation,
    FacilityRecord,
    MergedRecord,
    ResearchUnit,
    RetirementFilters,
    RetirementPage,
)

__all__ = [
    "AliasTable",
    "DelayCitation",
    "FacilityRecord",
    "ManualDelayIndex",
    "MergeConfig",
    "MergeEngine",
    "MergeStats",
    "MergedRecord",
    "Matcher",
    "MatcherStats",
    "ResearchUnit",
    "RetirementFilters",
    "RetirementPage",
    "RetirementService",
    "dedupe",
    "normalize",
    "paginate",
    "sort_records",
]

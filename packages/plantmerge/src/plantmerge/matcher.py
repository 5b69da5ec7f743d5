"""Cross-source matching of authoritative generators to research units."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from plantmerge.aliases import AliasTable
from plantmerge.config import NormalizationConfig
from plantmerge.index import GroupKey, ResearchIndex
from plantmerge.normalize import contains_match, normalize, numeric_portion
from plantmerge.types import FacilityRecord, MatchTier, ResearchMatch, ResearchUnit

log = structlog.get_logger()

UnitSelector = Callable[[str | None, list[ResearchUnit]], tuple[ResearchUnit, bool]]


def select_unit(generator_id: str | None, units: list[ResearchUnit]) -> tuple[ResearchUnit, bool]:
    """Pick the research unit corresponding to an authoritative generator id.

    Tried in order: same numeric portion ("1" ~ "Unit 1"), then the generator
    id as a whole token or suffix of the unit name ("GT" ~ "Unit GT"). When
    neither holds, the first unit of the group is returned and the second
    element of the result is True.
    """
    gen = (generator_id or "").strip().lower()
    digits = numeric_portion(gen)

    if digits:
        for unit in units:
            if numeric_portion(unit.unit_name) == digits:
                return unit, False

    if gen:
        for unit in units:
            label = unit.unit_name.strip().lower()
            if gen in label.split() or label.endswith(gen):
                return unit, False

    return units[0], True


@dataclass
class MatcherStats:
    """Statistics collected during matching."""

    attempts: int = 0
    unmatched: int = 0
    ambiguous: int = 0
    unit_fallbacks: int = 0
    tiers: dict[str, int] = field(default_factory=lambda: {
        "exact": 0, "alias": 0, "normalized": 0, "containment": 0
    })


class Matcher:
    """Four-tier facility matcher; the first tier that finds a group wins.

    1. exact (name, state) key
    2. curated alias of the name, exact key
    3. (normalized name, state) key
    4. containment scan over the state's groups, first match in index order
    """

    def __init__(
        self,
        aliases: AliasTable | None = None,
        config: NormalizationConfig | None = None,
        unit_selector: UnitSelector = select_unit,
    ) -> None:
        self.aliases = aliases if aliases is not None else AliasTable()
        self.config = config or NormalizationConfig()
        self.unit_selector = unit_selector
        self.stats = MatcherStats()

    def match(self, record: FacilityRecord, index: ResearchIndex) -> ResearchMatch | None:
        """Find the research group for a record and mark it consumed."""
        self.stats.attempts += 1
        found = self._find_group(record, index)
        if found is None:
            self.stats.unmatched += 1
            log.debug(
                "match_none",
                facility_name=record.facility_name,
                state=record.state,
                generator_id=record.generator_id,
            )
            return None

        tier, keys = found
        units: list[ResearchUnit] = []
        for key in keys:
            index.mark_consumed(key)
            units.extend(index.group(key))

        unit, fallback = self.unit_selector(record.generator_id, units)
        self.stats.tiers[tier] += 1
        if fallback:
            self.stats.unit_fallbacks += 1

        log.debug(
            "match_found",
            tier=tier,
            facility_name=record.facility_name,
            research_name=unit.facility_name,
            generator_id=record.generator_id,
            unit_name=unit.unit_name,
            unit_fallback=fallback,
        )
        return ResearchMatch(
            tier=tier,
            group_keys=list(keys),
            units=units,
            unit=unit,
            unit_fallback=fallback,
        )

    def _find_group(
        self, record: FacilityRecord, index: ResearchIndex
    ) -> tuple[MatchTier, list[GroupKey]] | None:
        name, state = record.facility_name, record.state

        if index.has_group((name, state)):
            return "exact", [(name, state)]

        for alias in self.aliases.aliases_for(name):
            if index.has_group((alias, state)):
                return "alias", [(alias, state)]

        norm = normalize(name, self.config)
        if not norm:
            return None

        keys = index.normalized_groups(norm, state)
        if keys:
            return "normalized", keys

        candidates = [
            key for key, group_norm in index.state_groups(state)
            if contains_match(norm, group_norm)
        ]
        if not candidates:
            return None
        if len(candidates) > 1:
            self.stats.ambiguous += 1
            log.debug(
                "match_ambiguous",
                facility_name=name,
                state=state,
                candidates=[k[0] for k in candidates],
                chosen=candidates[0][0],
            )
        return "containment", [candidates[0]]

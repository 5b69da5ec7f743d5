"""Research unit index grouped by facility for cross-source matching."""

from __future__ import annotations

from collections.abc import Iterator

from plantmerge.config import NormalizationConfig
from plantmerge.normalize import normalize
from plantmerge.types import ResearchUnit

GroupKey = tuple[str, str]


class ResearchIndex:
    """Research units grouped by (facility name, state), insertion ordered.

    An auxiliary index maps (normalized name, state) to the raw groups that
    share it. Groups handed out by the matcher are marked consumed so the
    merge engine does not emit them again as research-only records. One
    index belongs to one merge run.
    """

    def __init__(self, config: NormalizationConfig | None = None) -> None:
        self.config = config or NormalizationConfig()
        self._groups: dict[GroupKey, list[ResearchUnit]] = {}
        self._normalized: dict[GroupKey, list[GroupKey]] = {}
        self._by_state: dict[str, list[tuple[GroupKey, str]]] = {}
        self._consumed: set[GroupKey] = set()
        self.skipped = 0

    def build(self, units: list[ResearchUnit]) -> None:
        """Group research units; units without a usable name are skipped."""
        for unit in units:
            norm = normalize(unit.facility_name, self.config)
            if not norm:
                self.skipped += 1
                continue
            key = (unit.facility_name, unit.state)
            if key not in self._groups:
                self._groups[key] = []
                self._normalized.setdefault((norm, unit.state), []).append(key)
                self._by_state.setdefault(unit.state, []).append((key, norm))
            self._groups[key].append(unit)

    def __len__(self) -> int:
        return len(self._groups)

    def group(self, key: GroupKey) -> list[ResearchUnit]:
        return self._groups.get(key, [])

    def has_group(self, key: GroupKey) -> bool:
        return key in self._groups

    def normalized_groups(self, norm: str, state: str) -> list[GroupKey]:
        return list(self._normalized.get((norm, state), []))

    def state_groups(self, state: str) -> list[tuple[GroupKey, str]]:
        """(group key, normalized name) pairs for a state, in insertion order."""
        return list(self._by_state.get(state, []))

    def mark_consumed(self, key: GroupKey) -> None:
        self._consumed.add(key)

    def is_consumed(self, key: GroupKey) -> bool:
        return key in self._consumed

    def unconsumed_units(self) -> Iterator[ResearchUnit]:
        for key, units in self._groups.items():
            if key not in self._consumed:
                yield from units

"""Curated retirement-delay citations and their lookup index."""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from plantmerge.config import NormalizationConfig
from plantmerge.normalize import contains_match, normalize
from plantmerge.types import DelayCitation

log = structlog.get_logger()


def load_citations(path: str | Path) -> list[DelayCitation]:
    """Load delay citations from a JSON file, preserving file order."""
    path = Path(path)
    if not path.exists():
        log.info("manual_delays_file_not_found", path=str(path))
        return []

    try:
        with open(path) as f:
            data = json.load(f)

        citations = [
            DelayCitation(
                facility_name=c["facility_name"],
                state=c["state"],
                original_year=int(c["original_year"]),
                operator=c.get("operator"),
                revised_year=c.get("revised_year"),
                delay_years=c.get("delay_years"),
                indefinite=bool(c.get("indefinite", False)),
                emergency_order=bool(c.get("emergency_order", False)),
                source_label=c.get("source_label", ""),
                source_url=c.get("source_url"),
            )
            for c in data.get("citations", [])
        ]
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        log.error("manual_delays_load_error", path=str(path), error=str(e))
        return []

    log.info("manual_delays_loaded", count=len(citations))
    return citations


class ManualDelayIndex:
    """Read-only lookup over delay citations keyed by (normalized name, state).

    At most one citation is kept per key; the first one in list order wins.
    Partial lookups scan the state's citations in list order and return the
    first containment match, so list order is significant.
    """

    def __init__(
        self,
        citations: list[DelayCitation] | None = None,
        config: NormalizationConfig | None = None,
    ) -> None:
        self.config = config or NormalizationConfig()
        self._exact: dict[tuple[str, str], DelayCitation] = {}
        self._by_state: dict[str, list[tuple[str, DelayCitation]]] = {}

        for citation in citations or []:
            norm = normalize(citation.facility_name, self.config)
            if not norm:
                log.warning("manual_delay_unkeyable", facility_name=citation.facility_name)
                continue
            key = (norm, citation.state)
            if key in self._exact:
                log.warning(
                    "manual_delay_duplicate",
                    facility_name=citation.facility_name,
                    state=citation.state,
                )
                continue
            self._exact[key] = citation
            self._by_state.setdefault(citation.state, []).append((norm, citation))

    def __len__(self) -> int:
        return len(self._exact)

    def lookup(self, facility_name: str | None, state: str | None) -> DelayCitation | None:
        norm = normalize(facility_name, self.config)
        if not norm or not state:
            return None

        citation = self._exact.get((norm, state))
        if citation is not None:
            return citation

        for cited_norm, citation in self._by_state.get(state, []):
            if contains_match(norm, cited_norm):
                log.debug(
                    "manual_delay_partial_match",
                    facility_name=facility_name,
                    cited_name=citation.facility_name,
                    state=state,
                )
                return citation
        return None

"""Curated facility name aliases between the authoritative and research sources."""

from __future__ import annotations

import json
from pathlib import Path

import structlog

log = structlog.get_logger()


def load_alias_pairs(path: str | Path) -> list[tuple[str, str]]:
    """Load (authoritative name, research name) pairs from a JSON file."""
    path = Path(path)
    if not path.exists():
        log.info("aliases_file_not_found", path=str(path))
        return []
    try:
        data = json.loads(path.read_text())
        pairs = [(a["authoritative"], a["research"]) for a in data.get("aliases", [])]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        log.error("aliases_load_error", path=str(path), error=str(e))
        return []
    log.info("aliases_loaded", count=len(pairs))
    return pairs


class AliasTable:
    """Bidirectional exact-name alias map, read-only after construction."""

    def __init__(self, pairs: list[tuple[str, str]] | None = None) -> None:
        self._aliases: dict[str, list[str]] = {}
        for left, right in pairs or []:
            self._add(left, right)
            self._add(right, left)

    def _add(self, name: str, alias: str) -> None:
        known = self._aliases.setdefault(name, [])
        if alias not in known:
            known.append(alias)

    def __len__(self) -> int:
        return len(self._aliases)

    def aliases_for(self, name: str) -> list[str]:
        """Known aliases of a name, in the order they were declared."""
        return list(self._aliases.get(name, []))

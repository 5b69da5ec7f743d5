"""Collapse merged records that describe the same physical unit."""

from __future__ import annotations

import structlog

from plantmerge.config import DedupConfig, NormalizationConfig
from plantmerge.normalize import normalize, numeric_portion
from plantmerge.types import MergedRecord

log = structlog.get_logger()

DedupKey = tuple[str, str, str]


def dedup_key(
    record: MergedRecord,
    config: DedupConfig | None = None,
    norm_config: NormalizationConfig | None = None,
) -> DedupKey:
    """(normalized facility name, state, unit label) identity of a record.

    In the default ``digits`` mode the unit label is reduced to its digits,
    which is coarser than physical identity: "CT1" and "ST1" at one plant
    collide. Labels without digits ("A", "GT") keep the whole lower-cased
    label. ``full`` mode always keeps the whole lower-cased label.
    """
    config = config or DedupConfig()
    label = record.unit_label
    full = (label or "").strip().lower()
    if config.unit_key == "full":
        unit = full
    else:
        unit = numeric_portion(label) or full
    return (normalize(record.facility_name, norm_config), record.state, unit)


def _prefer(candidate: MergedRecord, kept: MergedRecord) -> bool:
    """True if ``candidate`` should replace ``kept``."""
    if len(candidate.data_sources) != len(kept.data_sources):
        return len(candidate.data_sources) > len(kept.data_sources)
    return candidate.facility_id is not None and kept.facility_id is None


def dedupe(
    records: list[MergedRecord],
    config: DedupConfig | None = None,
    norm_config: NormalizationConfig | None = None,
) -> list[MergedRecord]:
    """Keep one record per dedup key.

    Richer provenance wins; on a tie the record anchored to the
    authoritative source wins; otherwise the first one seen stays. Output
    keeps the position of each key's first occurrence.
    """
    kept: dict[DedupKey, MergedRecord] = {}
    collapsed = 0
    for record in records:
        key = dedup_key(record, config, norm_config)
        if not key[0]:
            log.debug("dedupe_drop_missing_identity", facility_name=record.facility_name)
            continue
        current = kept.get(key)
        if current is None:
            kept[key] = record
            continue
        collapsed += 1
        if _prefer(record, current):
            kept[key] = record
        log.debug(
            "dedupe_collapse",
            key=key,
            kept_sources=sorted(kept[key].data_sources),
        )

    log.info("dedupe_done", records_in=len(records), records_out=len(kept), collapsed=collapsed)
    return list(kept.values())

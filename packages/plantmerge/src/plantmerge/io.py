"""Writers for merged retirement records."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pandas as pd

from plantmerge.types import MergedRecord

FIELDNAMES = [
    "facilityId", "facilityName", "generatorId", "unitName", "state",
    "county", "city", "latitude", "longitude", "capacityMw", "fuelType",
    "operationalStatus", "owner", "dataSources", "resolvedPlannedDate",
    "authoritativeDate", "researchDate", "delayMonths", "delayYears",
    "originalPlannedYear", "revisedPlannedYear", "indefiniteDelay",
    "emergencyOrder", "extended", "sourceLabel", "sourceUrl",
]


def write_records(records: list[MergedRecord], path: str | Path) -> None:
    """Write merged records to CSV, JSONL or Excel, chosen by suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix == ".jsonl":
        _write_jsonl(records, path)
    elif path.suffix in (".xlsx", ".xls"):
        _write_excel(records, path)
    else:
        _write_csv(records, path)


def _flat_row(record: MergedRecord) -> dict:
    row = record.to_dict()
    row["dataSources"] = "|".join(row["dataSources"])
    return row


def _write_csv(records: list[MergedRecord], path: Path) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        for r in records:
            row = _flat_row(r)
            writer.writerow({k: "" if v is None else v for k, v in row.items()})


def _write_jsonl(records: list[MergedRecord], path: Path) -> None:
    with path.open("w", encoding="utf-8") as f:
        for r in records:
            f.write(json.dumps(r.to_dict()) + "\n")


def _write_excel(records: list[MergedRecord], path: Path) -> None:
    df = pd.DataFrame([_flat_row(r) for r in records], columns=FIELDNAMES)
    df.to_excel(path, index=False)

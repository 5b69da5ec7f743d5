"""Tests for the record writers."""

import csv
import json
from datetime import date
from pathlib import Path

import pandas as pd

from factories import make_record

from plantmerge.io import FIELDNAMES, write_records


def sample_records():
    return [
        make_record(
            "E C Gaston",
            sources=("manual", "authoritative"),
            resolved=date(2035, 12, 31),
        ),
        make_record("Plant Miller", sources=("research",), facility_id=None, generator_id=None, unit_name="Unit 1"),
    ]


class TestWriteRecords:
    def test_write_csv(self, tmp_path: Path):
        path = tmp_path / "out" / "retirements.csv"

        write_records(sample_records(), path)

        with path.open() as f:
            rows = list(csv.DictReader(f))
        assert list(rows[0]) == FIELDNAMES
        assert rows[0]["dataSources"] == "authoritative|manual"
        assert rows[0]["resolvedPlannedDate"] == "2035-12-31"
        assert rows[1]["facilityId"] == ""

    def test_write_jsonl(self, tmp_path: Path):
        path = tmp_path / "retirements.jsonl"

        write_records(sample_records(), path)

        lines = [json.loads(line) for line in path.read_text().splitlines()]
        assert len(lines) == 2
        assert lines[0]["dataSources"] == ["authoritative", "manual"]
        assert lines[1]["facilityId"] is None
        assert lines[1]["unitName"] == "Unit 1"

    def test_write_excel(self, tmp_path: Path):
        path = tmp_path / "retirements.xlsx"

        write_records(sample_records(), path)

        df = pd.read_excel(path)
        assert list(df.columns) == FIELDNAMES
        assert df["facilityName"].tolist() == ["E C Gaston", "Plant Miller"]

    def test_write_empty(self, tmp_path: Path):
        path = tmp_path / "retirements.csv"

        write_records([], path)

        assert path.read_text().strip() == ",".join(FIELDNAMES)

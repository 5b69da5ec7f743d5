"""Tests for the research index and alias table."""

import json
from pathlib import Path

from factories import make_unit

from plantmerge.aliases import AliasTable, load_alias_pairs
from plantmerge.index import ResearchIndex


class TestResearchIndex:
    def test_groups_by_name_and_state(self):
        index = ResearchIndex()
        index.build([
            make_unit("Barry", unit_name="Unit 1"),
            make_unit("Barry", unit_name="Unit 2"),
            make_unit("Barry", unit_name="Unit 1", state="GA"),
        ])

        assert len(index) == 2
        assert [u.unit_name for u in index.group(("Barry", "AL"))] == ["Unit 1", "Unit 2"]
        assert len(index.group(("Barry", "GA"))) == 1

    def test_normalized_key_shared_by_raw_groups(self):
        index = ResearchIndex()
        index.build([
            make_unit("Gaston Steam Plant"),
            make_unit("Gaston Station", unit_name="Unit 5"),
        ])

        assert len(index) == 2
        assert index.normalized_groups("gaston", "AL") == [
            ("Gaston Steam Plant", "AL"),
            ("Gaston Station", "AL"),
        ]

    def test_state_groups_in_insertion_order(self):
        index = ResearchIndex()
        index.build([make_unit("Clover"), make_unit("Cloverdale"), make_unit("Barry", state="GA")])

        assert index.state_groups("AL") == [
            (("Clover", "AL"), "clover"),
            (("Cloverdale", "AL"), "cloverdale"),
        ]
        assert index.state_groups("TX") == []

    def test_skips_units_without_identity(self):
        index = ResearchIndex()
        index.build([make_unit("Power Station"), make_unit("Barry")])

        assert len(index) == 1
        assert index.skipped == 1

    def test_consumed_groups_not_yielded(self):
        index = ResearchIndex()
        index.build([
            make_unit("Barry", unit_name="Unit 1"),
            make_unit("Gorgas", unit_name="Unit 8"),
            make_unit("Barry", unit_name="Unit 2"),
        ])

        index.mark_consumed(("Barry", "AL"))

        assert index.is_consumed(("Barry", "AL"))
        assert not index.is_consumed(("Gorgas", "AL"))
        assert [u.unit_name for u in index.unconsumed_units()] == ["Unit 8"]

    def test_unknown_group_is_empty(self):
        index = ResearchIndex()
        assert index.group(("Nowhere", "AL")) == []
        assert not index.has_group(("Nowhere", "AL"))


class TestAliasTable:
    def test_bidirectional(self):
        table = AliasTable([("E C Gaston", "Gaston Steam Plant")])

        assert table.aliases_for("E C Gaston") == ["Gaston Steam Plant"]
        assert table.aliases_for("Gaston Steam Plant") == ["E C Gaston"]

    def test_exact_names_only(self):
        table = AliasTable([("E C Gaston", "Gaston Steam Plant")])
        assert table.aliases_for("e c gaston") == []

    def test_multiple_aliases_keep_order(self):
        table = AliasTable([
            ("Barry", "Barry Steam Plant"),
            ("Barry", "James M Barry"),
            ("Barry", "Barry Steam Plant"),
        ])
        assert table.aliases_for("Barry") == ["Barry Steam Plant", "James M Barry"]

    def test_load_pairs(self, tmp_path: Path):
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps({
            "aliases": [{"authoritative": "E C Gaston", "research": "Gaston Steam Plant"}]
        }))

        assert load_alias_pairs(path) == [("E C Gaston", "Gaston Steam Plant")]

    def test_load_missing_file(self, tmp_path: Path):
        assert load_alias_pairs(tmp_path / "missing.json") == []

    def test_load_malformed_entry(self, tmp_path: Path):
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps({"aliases": [{"authoritative": "E C Gaston"}]}))
        assert load_alias_pairs(path) == []

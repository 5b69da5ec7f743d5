"""Tests for the cross-source facility matcher."""

from factories import make_facility, make_unit

from plantmerge.aliases import AliasTable
from plantmerge.index import ResearchIndex
from plantmerge.matcher import Matcher, select_unit


def build_index(*units) -> ResearchIndex:
    index = ResearchIndex()
    index.build(list(units))
    return index


def test_exact_match():
    index = build_index(make_unit("Barry"))
    result = Matcher().match(make_facility("Barry"), index)

    assert result is not None
    assert result.tier == "exact"
    assert result.group_keys == [("Barry", "AL")]


def test_alias_match():
    index = build_index(make_unit("Gaston Steam Plant"))
    matcher = Matcher(AliasTable([("E C Gaston", "Gaston Steam Plant")]))

    result = matcher.match(make_facility("E C Gaston"), index)

    assert result is not None
    assert result.tier == "alias"
    assert result.unit.facility_name == "Gaston Steam Plant"


def test_normalized_match():
    index = build_index(make_unit("Barry Steam Plant"))
    result = Matcher().match(make_facility("Barry"), index)

    assert result is not None
    assert result.tier == "normalized"


def test_normalized_match_takes_every_group_with_the_key():
    index = build_index(
        make_unit("Gaston Steam Plant", unit_name="Unit 1"),
        make_unit("Gaston Station", unit_name="Unit 5"),
    )
    result = Matcher().match(make_facility("Gaston", generator_id="5"), index)

    assert result is not None
    assert result.tier == "normalized"
    assert len(result.group_keys) == 2
    assert result.unit.unit_name == "Unit 5"
    assert index.is_consumed(("Gaston Steam Plant", "AL"))
    assert index.is_consumed(("Gaston Station", "AL"))


def test_containment_match():
    index = build_index(make_unit("Gaston Steam Plant"))
    result = Matcher().match(make_facility("E C Gaston"), index)

    assert result is not None
    assert result.tier == "containment"


def test_state_must_match():
    index = build_index(make_unit("Barry", state="GA"))
    matcher = Matcher()

    assert matcher.match(make_facility("Barry", state="AL"), index) is None
    assert matcher.stats.unmatched == 1


def test_unnamed_facility_does_not_match():
    index = build_index(make_unit("Barry"))
    assert Matcher().match(make_facility("Power Station"), index) is None


def test_ambiguous_containment_takes_first_in_index_order():
    index = build_index(make_unit("Clover"), make_unit("Cloverdale"))
    matcher = Matcher()

    result = matcher.match(make_facility("Cloverdale Hill"), index)

    assert result is not None
    assert result.tier == "containment"
    assert result.group_keys == [("Clover", "AL")]
    assert matcher.stats.ambiguous == 1


def test_match_marks_group_consumed():
    index = build_index(
        make_unit("Barry", unit_name="Unit 1"),
        make_unit("Barry", unit_name="Unit 2"),
        make_unit("Gorgas", unit_name="Unit 8"),
    )
    Matcher().match(make_facility("Barry"), index)

    assert index.is_consumed(("Barry", "AL"))
    assert [u.facility_name for u in index.unconsumed_units()] == ["Gorgas"]


def test_stats_count_tiers():
    index = build_index(make_unit("Barry"), make_unit("Gorgas Steam Plant"))
    matcher = Matcher()
    matcher.match(make_facility("Barry"), index)
    matcher.match(make_facility("Gorgas"), index)
    matcher.match(make_facility("Miller"), index)

    assert matcher.stats.attempts == 3
    assert matcher.stats.tiers["exact"] == 1
    assert matcher.stats.tiers["normalized"] == 1
    assert matcher.stats.unmatched == 1


def test_custom_unit_selector():
    def last_unit(generator_id, units):
        return units[-1], False

    index = build_index(
        make_unit("Barry", unit_name="Unit 1"),
        make_unit("Barry", unit_name="Unit 2"),
    )
    result = Matcher(unit_selector=last_unit).match(make_facility("Barry", generator_id="1"), index)

    assert result is not None
    assert result.unit.unit_name == "Unit 2"


class TestSelectUnit:
    def test_numeric_match(self):
        units = [make_unit("Barry", unit_name="Unit 1"), make_unit("Barry", unit_name="Unit 2")]
        unit, fallback = select_unit("2", units)
        assert unit.unit_name == "Unit 2"
        assert fallback is False

    def test_numeric_match_is_whole_number(self):
        units = [make_unit("Barry", unit_name="Unit 1"), make_unit("Barry", unit_name="Unit 10")]
        unit, _ = select_unit("10", units)
        assert unit.unit_name == "Unit 10"

    def test_prefixed_generator_id(self):
        units = [make_unit("Barry", unit_name="Unit 3"), make_unit("Barry", unit_name="Unit 4")]
        unit, fallback = select_unit("ST4", units)
        assert unit.unit_name == "Unit 4"
        assert fallback is False

    def test_token_match(self):
        units = [make_unit("Barry", unit_name="Unit 1"), make_unit("Barry", unit_name="Unit GT")]
        unit, fallback = select_unit("GT", units)
        assert unit.unit_name == "Unit GT"
        assert fallback is False

    def test_fallback_to_first(self):
        units = [make_unit("Barry", unit_name="Unit A"), make_unit("Barry", unit_name="Unit B")]
        unit, fallback = select_unit("X", units)
        assert unit.unit_name == "Unit A"
        assert fallback is True

    def test_missing_generator_id_falls_back(self):
        units = [make_unit("Barry", unit_name="Unit 1")]
        unit, fallback = select_unit(None, units)
        assert unit.unit_name == "Unit 1"
        assert fallback is True

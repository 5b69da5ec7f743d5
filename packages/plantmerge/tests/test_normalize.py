"""Tests for facility name normalization."""

from plantmerge.config import NormalizationConfig
from plantmerge.normalize import contains_match, normalize, numeric_portion


def test_strips_facility_type_words():
    assert normalize("Gaston Steam Plant") == "gaston"
    assert normalize("Big Bend Power Station") == "big bend"
    assert normalize("Crystal River Energy Complex") == "crystal river"


def test_lowercases_and_strips_punctuation():
    assert normalize("E.C. Gaston") == "ec gaston"
    assert normalize("James H. Miller Jr.") == "james h miller jr"
    assert normalize("Gibson (Duke)") == "gibson duke"


def test_collapses_whitespace():
    assert normalize("  Big   Bend \t Station ") == "big bend"


def test_total_on_empty_input():
    assert normalize(None) == ""
    assert normalize("") == ""
    assert normalize("Power Plant") == ""


def test_stopword_only_as_whole_token():
    # "Powerton" keeps its name even though it starts with "power"
    assert normalize("Powerton Generating Station") == "powerton"


def test_custom_stoplist():
    config = NormalizationConfig(stopwords=("unit",))
    assert normalize("Barry Steam Unit", config) == "barry steam"


def test_contains_match():
    assert contains_match("gaston", "e c gaston")
    assert contains_match("e c gaston", "gaston")
    assert contains_match("barry", "barry")
    assert not contains_match("barry", "gaston")


def test_contains_match_is_permissive():
    assert contains_match("clover", "cloverdale")


def test_contains_match_rejects_empty():
    assert not contains_match("", "gaston")
    assert not contains_match("gaston", "")


def test_numeric_portion():
    assert numeric_portion("ST1") == "1"
    assert numeric_portion("Unit 4A") == "4"
    assert numeric_portion("Unit 10") == "10"
    assert numeric_portion("GT") == ""
    assert numeric_portion(None) == ""

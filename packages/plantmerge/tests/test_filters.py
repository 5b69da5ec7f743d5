"""Tests for filter validation and per-source filter predicates."""

from factories import make_facility, make_unit

from plantmerge.config import FilterConfig
from plantmerge.filters import (
    authoritative_passes,
    research_passes,
    validate_filters,
    validate_fuel_type,
    validate_page,
    validate_state,
)
from plantmerge.types import RetirementFilters


class TestValidate:
    def test_state(self):
        assert validate_state("al") == "AL"
        assert validate_state(" tx ") == "TX"
        assert validate_state("DC") == "DC"

    def test_invalid_state_defaults_to_all(self):
        assert validate_state("ZZ") == ""
        assert validate_state("Alabama") == ""
        assert validate_state(None) == ""

    def test_fuel_type(self):
        assert validate_fuel_type("Coal") == "coal"
        assert validate_fuel_type("gas") == "gas"

    def test_unknown_fuel_type_defaults_to_all(self):
        assert validate_fuel_type("plutonium") == ""
        assert validate_fuel_type("") == ""

    def test_page(self):
        assert validate_page("2") == 2
        assert validate_page(3) == 3

    def test_bad_page_defaults_to_first(self):
        assert validate_page("abc") == 1
        assert validate_page("-3") == 1
        assert validate_page("0") == 1
        assert validate_page(None) == 1
        assert validate_page("") == 1

    def test_validate_filters(self):
        filters = validate_filters("ga", "COAL", "4")
        assert filters == RetirementFilters(state="GA", fuel_type="coal", page=4)

    def test_validate_filters_never_raises(self):
        filters = validate_filters("nowhere", "unobtainium", "first")
        assert filters == RetirementFilters()


class TestAuthoritativePasses:
    def test_no_filters(self):
        assert authoritative_passes(make_facility("Barry"), None)
        assert authoritative_passes(make_facility("Barry"), RetirementFilters())

    def test_state(self):
        filters = RetirementFilters(state="GA")
        assert not authoritative_passes(make_facility("Barry", state="AL"), filters)
        assert authoritative_passes(make_facility("Bowen", state="GA"), filters)

    def test_fuel_is_exact_code(self):
        filters = RetirementFilters(fuel_type="gas")
        assert authoritative_passes(make_facility("Barry", fuel_type="Gas"), filters)
        assert not authoritative_passes(make_facility("Barry", fuel_type="natural gas"), filters)
        assert not authoritative_passes(make_facility("Barry", fuel_type="coal"), filters)

    def test_fuel_types_of_interest(self):
        config = FilterConfig(fuel_types_of_interest=["coal"])
        assert authoritative_passes(make_facility("Barry", fuel_type="coal"), None, config)
        assert not authoritative_passes(make_facility("Barry", fuel_type="gas"), None, config)


class TestResearchPasses:
    def test_fuel_is_substring(self):
        filters = RetirementFilters(fuel_type="gas")
        assert research_passes(make_unit("Barry", fuel_type="Natural Gas"), filters)
        assert not research_passes(make_unit("Barry", fuel_type="coal: bituminous"), filters)

    def test_state(self):
        filters = RetirementFilters(state="AL")
        assert research_passes(make_unit("Barry", state="AL"), filters)
        assert not research_passes(make_unit("Bowen", state="GA"), filters)

    def test_fuel_types_of_interest(self):
        config = FilterConfig(fuel_types_of_interest=["coal"])
        assert research_passes(make_unit("Barry", fuel_type="coal: lignite"), None, config)
        assert not research_passes(make_unit("Barry", fuel_type="oil"), None, config)

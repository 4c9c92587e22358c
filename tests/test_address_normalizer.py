"""
Tests for the address normalizer.
"""

import pytest

from washregistry.domain.address_normalizer import area_from_display_name, normalize_address
from washregistry.domain.models import ResolvedAddress


class TestNormalizeAddress:
    """Tests for field extraction and fallbacks."""

    def test_area_falls_back_to_display_name_segment(self):
        response = {
            "display_name": "Tahrir St, 5, Downtown, Cairo, Egypt",
            "address": {"road": "Tahrir St", "house_number": "5", "city": "Cairo"},
        }

        address = normalize_address(response)

        assert address == ResolvedAddress(
            street="Tahrir St",
            street_number="5",
            city="Cairo",
            area="Downtown",
            display_address="Tahrir St, 5, Downtown, Cairo, Egypt",
        )

    @pytest.mark.parametrize(
        "display_name",
        ["Tahrir St, Cairo, Egypt", "Cairo, Egypt", "Egypt", ""],
    )
    def test_short_display_name_leaves_area_empty(self, display_name):
        address = normalize_address({"display_name": display_name, "address": {}})

        assert address.area == ""

    def test_structured_area_wins_over_display_name(self):
        response = {
            "display_name": "Road 9, 14, Maadi, Cairo, Egypt",
            "address": {"neighbourhood": "Sarayat", "county": "Cairo Governorate"},
        }

        assert normalize_address(response).area == "Sarayat"

    @pytest.mark.parametrize(
        "key",
        ["suburb", "neighbourhood", "district", "quarter", "state_district", "hamlet", "county"],
    )
    def test_each_area_key_is_used(self, key):
        assert normalize_address({"address": {key: "Zamalek"}}).area == "Zamalek"

    def test_area_key_priority(self):
        components = {"county": "C", "hamlet": "H", "district": "D", "suburb": "S"}

        assert normalize_address({"address": components}).area == "S"

    def test_street_and_city_fallbacks(self):
        address = normalize_address({"address": {"street": "El Nasr", "village": "Abu Rawash"}})

        assert address.street == "El Nasr"
        assert address.city == "Abu Rawash"

    def test_city_prefers_city_then_town(self):
        components = {"village": "V", "town": "Giza"}

        assert normalize_address({"address": components}).city == "Giza"

    def test_empty_values_fall_through(self):
        address = normalize_address({"address": {"road": "", "street": "Second St", "suburb": "  "}})

        assert address.street == "Second St"
        assert address.area == ""

    def test_display_name_kept_verbatim(self):
        display_name = "  12, Corniche El Nil,  Garden City , Cairo, Egypt"

        address = normalize_address({"display_name": display_name})

        assert address.display_address == display_name
        assert address.area == "Garden City"


class TestMalformedInput:
    """The normalizer never raises."""

    @pytest.mark.parametrize("response", [None, [], "Cairo", 42, {}])
    def test_non_mapping_or_empty_input(self, response):
        assert normalize_address(response) == ResolvedAddress.empty()

    def test_wrong_types_degrade_to_empty(self):
        response = {
            "display_name": ["not", "a", "string"],
            "address": {"road": None, "house_number": 5, "city": {"name": "Cairo"}},
        }

        address = normalize_address(response)

        assert address.street == ""
        assert address.street_number == "5"
        assert address.city == ""
        assert address.display_address == ""

    def test_address_not_a_mapping(self):
        response = {"display_name": "A, B, C, D", "address": "oops"}

        assert normalize_address(response).area == "C"


def test_area_from_display_name_trims_segments():
    assert area_from_display_name("a ,b,  c  ,d") == "c"

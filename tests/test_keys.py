"""
Tests for the Key Builder.
"""

import pytest

from boards.identity.identifier import BoardIdentifier
from boards.identity.keys import (
    board_key,
    compose_key,
    gender_bucket,
    gender_from_key,
    identity_key,
    listing_id,
    split_key,
)


class TestBoardKey:
    def test_basic_key(self):
        assert board_key("Burton", "Custom Snowboard 2026") == "burton|custom|unisex"

    def test_rider_and_gender(self):
        assert board_key("CAPiTA", "Equalizer By Jess Kimura", "Women's") == "capita|equalizer|womens"

    def test_raw_and_normalized_inputs_agree(self):
        assert board_key("Burton Snowboards", "CUSTOM SNOWBOARD") == board_key("burton", "Custom")

    def test_manufacturer_and_retailer_titles_agree(self):
        retailer = board_key("LIB TECH", "Lib Tech T.Rice Orca Snowboard 2025 - 159")
        manufacturer = board_key("Lib Technologies", "Orca")
        assert retailer == manufacturer == "lib tech|orca|unisex"

    def test_profile_variants_stay_distinct(self):
        assert board_key("Burton", "Custom") != board_key("Burton", "Custom Camber")


    def test_distinct_models_sharing_a_word_stay_distinct(self):
        assert board_key("GNU", "Money") != board_key("GNU", "C Money")
    def test_kids_prefix_dropped_for_kids_boards(self):
        assert board_key("Burton", "Kids Custom Smalls", "kids") == "burton|custom smalls|kids"

    def test_kids_prefix_kept_for_other_genders(self):
        assert board_key("Burton", "Kids Custom Smalls") == "burton|kids custom smalls|unisex"

    def test_separator_never_inside_a_segment(self):
        key = board_key("Jones", "Mind|Expander")
        assert key.count("|") == 2

    def test_unknown_brand_and_model(self):
        assert board_key(None, None) == "unknown|unknown|unisex"


class TestGenderBucket:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Women's", "womens"),
            ("women", "womens"),
            ("Ladies", "womens"),
            ("female", "womens"),
            ("Women’s", "womens"),
            ("male", "unisex"),
            ("Youth", "kids"),
            ("boys", "kids"),
            ("Men's", "unisex"),
            (None, "unisex"),
            ("", "unisex"),
        ],
    )
    def test_buckets(self, value, expected):
        assert gender_bucket(value) == expected


class TestIdentityKey:
    def test_key_model_matches_identifier_model(self):
        ident = BoardIdentifier("Burton Men's Custom Snowboard 2025", "Burton")

        assert identity_key(ident) == "burton|custom|unisex"
        assert split_key(identity_key(ident))[1] == ident.model.lower()

    def test_agrees_with_board_key_on_raw_input(self):
        ident = BoardIdentifier("Jones Flagship C2 Camber", "Jones", gender_hint="female")
        assert identity_key(ident) == board_key("Jones", "Jones Flagship C2 Camber", "female")

    def test_compose_key_drops_kids_prefix(self):
        assert compose_key("Burton", "Kids Custom Smalls", "kids") == "burton|custom smalls|kids"


class TestSplitKey:
    def test_round_trip(self):
        key = board_key("Never Summer", "Proto Synthesis", "womens")
        assert split_key(key) == ("never summer", "proto synthesis", "womens")
        assert gender_from_key(key) == "womens"

    def test_malformed_key(self):
        with pytest.raises(ValueError):
            split_key("burton-custom")


class TestListingId:
    def test_stable_16_hex(self):
        first = listing_id("evo", "https://www.evo.com/custom", 158)
        second = listing_id("evo", "https://www.evo.com/custom", 158.0)

        assert first == second
        assert len(first) == 16
        int(first, 16)

    def test_differs_by_length_and_url(self):
        base = listing_id("evo", "https://www.evo.com/custom", 158)

        assert base != listing_id("evo", "https://www.evo.com/custom", 162)
        assert base != listing_id("evo", "https://www.evo.com/custom-camber", 158)
        assert base != listing_id("evo", "https://www.evo.com/custom")

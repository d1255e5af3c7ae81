"""
Tests for the Board Coalescing Engine.

Covers:
- Grouping scraped records from mixed sources under one board key
- Listing flattening (retailer, prices, condition, combo contents)
- Spec resolution across group members
- Provenance and spec cache writes
"""

import pytest
from django.test import override_settings

from boards.services.coalescer import (
    coalesce,
    identify_boards,
    member_spec_fields,
)
from boards.types import ScrapedBoard, ScrapedListing


class TestIdentifyBoards:
    def test_groups_by_key_in_first_seen_order(self, custom_records):
        groups = identify_boards(custom_records)

        assert list(groups) == ["burton|custom|unisex", "burton|custom camber|unisex"]
        assert len(groups["burton|custom|unisex"].members) == 3
        assert groups["burton|custom camber|unisex"].model == "Custom Camber"

    def test_gender_splits_groups(self):
        records = [
            ScrapedBoard(source_id="retailer:evo", brand="Burton", raw_model_title="Feelgood"),
            ScrapedBoard(
                source_id="retailer:evo", brand="Burton", raw_model_title="Feelgood - Women's"
            ),
            ScrapedBoard(
                source_id="retailer:rei", brand="Burton", raw_model_title="Feelgood", gender_hint="Womens"
            ),
        ]

        groups = identify_boards(records)

        assert list(groups) == ["burton|feelgood|unisex", "burton|feelgood|womens"]
        assert len(groups["burton|feelgood|womens"].members) == 2

    def test_group_model_matches_key(self):
        records = [
            ScrapedBoard(
                source_id="manufacturer:burton",
                brand="Burton",
                raw_model_title="Burton Men's Custom Snowboard 2025",
            ),
            ScrapedBoard(source_id="retailer:evo", brand="Burton", raw_model_title="Custom"),
        ]

        groups = identify_boards(records)

        assert list(groups) == ["burton|custom|unisex"]
        assert groups["burton|custom|unisex"].model == "Custom"
        assert len(groups["burton|custom|unisex"].members) == 2

    def test_missing_brand_still_groups(self):
        groups = identify_boards(
            [ScrapedBoard(source_id="retailer:evo", brand=None, raw_model_title="Mystery Board 2025")]
        )
        assert list(groups) == ["unknown|mystery board|unisex"]


class TestMemberSpecFields:
    def test_normalized_fields_then_extras(self):
        record = ScrapedBoard(
            source_id="review-site:tgr",
            brand="Burton",
            raw_model_title="Custom",
            flex="Medium-Stiff",
            profile="Camber",
            category="Freestyle",
            extras={"stance": "Centered"},
        )

        fields = member_spec_fields(record)

        assert fields[:3] == [("flex", "6"), ("profile", "camber"), ("category", "freestyle")]
        assert ("stance", "Centered") in fields
        assert ("terrain_freestyle", "3") in fields

    def test_terrain_extras_suppress_derived_terrain(self):
        record = ScrapedBoard(
            source_id="llm",
            brand="Burton",
            raw_model_title="Custom",
            category="Freestyle",
            extras={"terrain_park": "3", "ability level": "Beginner"},
        )

        fields = member_spec_fields(record)

        assert ("terrain_park", "3") in fields
        assert ("terrain_freestyle", "3") not in fields
        assert ("abilityLevel", "beginner") in fields

    def test_empty_record(self):
        record = ScrapedBoard(source_id="retailer:evo", brand="Burton", raw_model_title="Custom")
        assert member_spec_fields(record) == []


class TestCoalesce:
    """End-to-end coalescing without database writes."""

    def test_retailer_and_manufacturer_records(self, custom_records):
        result = coalesce(custom_records, record_provenance=False)

        assert [b.board_key for b in result.boards] == [
            "burton|custom|unisex",
            "burton|custom camber|unisex",
        ]

        custom = result.board("burton|custom|unisex")
        assert [listing.length_cm for listing in custom.listings] == [155, 158, 161]
        assert [listing.retailer for listing in custom.listings] == ["evo", "rei", "backcountry"]
        assert custom.year == 2026
        assert custom.msrp_usd is None

        camber = result.board("burton|custom camber|unisex")
        assert camber.listings == []
        assert camber.msrp_usd == 659.95
        assert camber.manufacturer_url == "https://www.burton.com/us/en/p/custom-camber"
        assert camber.description == "The board that started it all."

        assert len(result.listings) == 3

    def test_specs_resolved_across_members(self, custom_records):
        result = coalesce(custom_records, record_provenance=False)
        custom = result.board("burton|custom|unisex")

        assert custom.flex == 6.0
        assert custom.profile == "camber"
        assert custom.category == "all_mountain"
        assert custom.terrain_scores["piste"] == 3
        assert custom.disagreements == ["flex"]
        assert custom.spec_sources["flex"].resolved_source == "retailer:evo"

        camber = result.board("burton|custom camber|unisex")
        assert camber.shape == "directional_twin"
        assert (camber.ability_level_min, camber.ability_level_max) == ("intermediate", "expert")
        assert camber.disagreements == []

    def test_manufacturer_overrides_retailer_specs(self):
        records = [
            ScrapedBoard(source_id="retailer:evo", brand="Ride", raw_model_title="Warpig", flex="3"),
            ScrapedBoard(
                source_id="manufacturer:ride",
                brand="Ride",
                raw_model_title="Warpig",
                flex="5",
                msrp_usd=549.99,
            ),
        ]

        board = coalesce(records, record_provenance=False).board("ride|warpig|unisex")

        assert board.flex == 5.0
        assert board.msrp_usd == 549.99
        assert board.spec_sources["flex"].agreement is False

    def test_listing_details(self, custom_records):
        result = coalesce(custom_records, record_provenance=False)
        rei = result.board("burton|custom|unisex").listings[1]

        assert rei.sale_price_usd == 549.0
        assert rei.original_price_usd == 659.0
        assert rei.discount_percent == 17
        assert rei.availability == "in_stock"
        assert rei.condition == "new"
        assert rei.board_key == "burton|custom|unisex"
        assert len(rei.id) == 16

    def test_listing_condition_and_combo(self):
        records = [
            ScrapedBoard(
                source_id="retailer:evo",
                brand="Burton",
                raw_model_title="Burton Custom Snowboard + Cartel Binding",
                listings=[
                    ScrapedListing(url="https://www.evo.com/outlet/burton-custom-combo", sale_price=700)
                ],
            )
        ]

        listing = coalesce(records, record_provenance=False).listings[0]

        assert listing.board_key == "burton|custom|unisex"
        assert listing.condition == "closeout"
        assert listing.combo_contents == "Cartel Binding"

    @override_settings(BOARDS_KRW_TO_USD_RATE=0.00075)
    def test_krw_listing(self):
        records = [
            ScrapedBoard(
                source_id="retailer:rice-korea",
                brand="Burton",
                raw_model_title="Custom",
                region="KR",
                listings=[
                    ScrapedListing(
                        url="https://rice.example.kr/custom",
                        sale_price=800000,
                        original_price=1000000,
                        currency="KRW",
                    )
                ],
            )
        ]

        listing = coalesce(records, record_provenance=False).listings[0]

        assert listing.sale_price_usd == 600.0
        assert listing.original_price_usd == 750.0
        assert listing.discount_percent == 20
        assert listing.region == "KR"

    def test_deterministic(self, custom_records):
        first = coalesce(custom_records, record_provenance=False)
        second = coalesce(list(custom_records), record_provenance=False)
        assert first == second

    def test_empty_input(self):
        result = coalesce([], record_provenance=False)
        assert result.boards == []
        assert result.listings == []

    def test_from_extractor_json(self):
        record = ScrapedBoard.from_dict(
            {
                "sourceId": "retailer:evo",
                "brand": "Lib Tech",
                "rawModelTitle": "Lib Tech T.Rice Orca Snowboard 2025",
                "flex": 8,
                "listings": [{"url": "https://www.evo.com/orca-159", "salePrice": "499.95", "lengthCm": 159}],
            }
        )

        result = coalesce([record], record_provenance=False)

        assert result.boards[0].board_key == "lib tech|orca|unisex"
        assert result.boards[0].flex == 8.0
        assert result.listings[0].sale_price_usd == 499.95


@pytest.mark.django_db
class TestCoalesceProvenance:
    def test_provenance_rows_and_spec_cache(self, custom_records):
        from boards.models import SpecCache, SpecSource

        coalesce(custom_records, run_id="run-1")

        flex_sources = list(
            SpecSource.objects.filter(board_key="burton|custom|unisex", field_name="flex")
            .values_list("source", "value")
        )
        assert flex_sources == [("retailer:evo", "6"), ("retailer:rei", "5")]

        cached = SpecCache.objects.get(board_key="burton|custom camber|unisex")
        assert cached.source == "manufacturer:burton"
        assert cached.msrp_usd == 659.95
        assert cached.shape == "directional_twin"
        assert not SpecCache.objects.filter(board_key="burton|custom|unisex").exists()

    def test_manufacturer_cache_not_replaced(self, custom_records):
        from boards.models import SpecCache
        from boards.services.spec_tracker import get_spec_tracker

        get_spec_tracker().set_cached_spec(
            "burton|custom camber|unisex", "manufacturer:burton", brand="Burton", flex=7.0
        )

        coalesce(custom_records)

        assert SpecCache.objects.get(board_key="burton|custom camber|unisex").flex == 7.0

    def test_dry_run_writes_nothing(self, custom_records):
        from boards.models import SpecCache, SpecSource

        coalesce(custom_records, record_provenance=False)

        assert SpecSource.objects.count() == 0
        assert SpecCache.objects.count() == 0

"""
Tests for the Brand Canonicalizer.
"""

import pytest

from boards.identity.brands import (
    UNKNOWN_BRAND,
    canonical_brand_name,
    canonicalize,
    clean_brand,
    first_brand,
)


class TestCanonicalBrandName:
    """Raw brand spellings resolve to one catalog name."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Burton", "Burton"),
            ("BURTON", "Burton"),
            ("Burton Snowboards", "Burton"),
            ("LIB TECH", "Lib Tech"),
            ("Lib Technologies", "Lib Tech"),
            ("libtech", "Lib Tech"),
            ("Capita Snowboarding", "CAPiTA"),
            ("rome snowboards", "Rome"),
            ("yes", "Yes."),
            ("DWD", "Dinosaurs Will Die"),
            ("Never-Summer", "Never Summer"),
        ],
    )
    def test_known_brands(self, raw, expected):
        assert canonical_brand_name(raw) == expected

    def test_unknown_brand_is_title_cased(self):
        assert canonical_brand_name("acme board works") == "Acme Board Works"

    @pytest.mark.parametrize("raw", [None, "", "   ", "Snowboards", 42])
    def test_empty_input_is_unknown(self, raw):
        assert canonical_brand_name(raw) == UNKNOWN_BRAND

    def test_zero_width_characters_are_ignored(self):
        assert canonical_brand_name("Bur\u200bton") == "Burton"

    def test_is_deterministic(self):
        assert canonical_brand_name("gnu") == canonical_brand_name("GNU") == "GNU"


class TestCleanBrand:
    def test_strips_company_suffix(self):
        assert clean_brand("Never Summer Snowboard Co.") == "Never Summer"


class TestCanonicalize:
    """BrandIdentifier carries the manufacturer group."""

    def test_manufacturer_group(self):
        assert canonicalize("gnu").manufacturer_slug == "mervin"
        assert canonicalize("Lib Tech").manufacturer_slug == "mervin"
        assert canonicalize("Burton").manufacturer_slug == "burton"

    def test_unlisted_brand_uses_default_group(self):
        assert canonicalize("Ride").manufacturer_slug == "default"

    def test_equality_ignores_raw_input(self):
        assert canonicalize("LIB TECH") == canonicalize("libtech")

    def test_keeps_raw_input(self):
        ident = canonicalize("Capita Snowboarding")
        assert ident.raw_input == "Capita Snowboarding"
        assert str(ident) == "CAPiTA"

    def test_none_input(self):
        ident = canonicalize(None)
        assert ident.canonical_name == UNKNOWN_BRAND
        assert ident.raw_input == ""


class TestFirstBrand:
    def test_skips_empty_candidates(self):
        assert first_brand(None, "  ", "burton").canonical_name == "Burton"

    def test_no_usable_candidate(self):
        assert first_brand(None, "", 7) is None

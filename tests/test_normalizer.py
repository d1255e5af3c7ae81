"""
Tests for the Model Normalizer and its rule table.

Covers:
- Retail noise (years, sizes, combos, tags) is stripped
- Brand-scoped rules only fire for their brand
- Profile designators follow the keep-words brand list
- The debug trace mirrors the pipeline
"""

import pytest

from boards.exceptions import RuleTableError
from boards.identity.normalizer import ModelNormalizer, normalize, normalize_with_trace
from boards.identity.rules import load_rule_table, parse_rule_table


RETAIL_NOISE_CASES = [
    ("Burton Custom Snowboard 2026", "Burton", "Custom"),
    ("Burton Process Snowboard 2024/2025", "Burton", "Process"),
    ("Ride Warpig 2627 EARLY RELEASE", "Ride", "Warpig"),
    ("Ride Warpig - 2026", "Ride", "Warpig"),
    ("Custom Snowboard - 158", "Burton", "Custom"),
    ("Doughboy 185", None, "Doughboy"),
    ("Burton Custom Snowboard + Cartel Binding", "Burton", "Custom"),
    ("Burton Custom w/ Package", "Burton", "Custom"),
    ("Burton Custom & Bindings", "Burton", "Custom"),
    ("Ride Warpig (Closeout)", "Ride", "Warpig"),
    ("Ride Warpig - Blem", "Ride", "Warpig"),
    ("Jones Mind Expander | Split", "Jones", "Mind Expander Split"),
]


class TestRetailNoise:
    """Title decorations that never distinguish one board from another."""

    @pytest.mark.parametrize("raw, brand, expected", RETAIL_NOISE_CASES)
    def test_strips_noise(self, raw, brand, expected):
        assert normalize(raw, brand) == expected

    def test_keeps_non_length_numbers(self):
        assert normalize("Board 100", None) == "Board 100"
        assert normalize("K2000", None) == "K2000"

    def test_strips_gender_words(self):
        assert normalize("Feelgood Snowboard - Women's 2025", "Burton") == "Feelgood"
        assert normalize("Women's Feelgood", "Burton") == "Feelgood"

    def test_strips_zero_width_characters(self):
        assert normalize("Cus\u200btom", "Burton") == "Custom"


class TestBrandScopedRules:
    def test_brand_prefix(self):
        assert normalize("Lib Tech Orca", "libtech") == "Orca"

    def test_partial_brand_leak(self):
        assert normalize("Tech Skunk Ape", "Lib Tech") == "Skunk Ape"

    def test_leak_rule_ignores_other_brands(self):
        assert normalize("Tech Deck", "Burton") == "Tech Deck"

    def test_correction_then_rider_prefix(self):
        assert normalize("Lib Tech T.Rice Orca", "Lib Tech") == "Orca"

    def test_rider_infix(self):
        assert normalize("CAPiTA Equalizer By Jess Kimura", "CAPiTA") == "Equalizer"

    def test_rider_suffix(self):
        assert normalize("Kazu Kokubo Pro Arthur Longo", "CAPiTA") == "Kazu Kokubo Pro"

    def test_rider_names_are_sponsor_scoped(self):
        assert normalize("Equalizer By Jess Kimura", "Burton") == "Equalizer By Jess Kimura"

    def test_shape_modifier(self):
        assert normalize("GNU Asym Ladies Choice C2X Snowboard - Women's 2025", "GNU") == "Ladies Choice"

    def test_series_prefix(self):
        assert normalize("Signature Series Pro", "Burton") == "Pro"

    def test_model_alias(self):
        assert normalize("Yes. Hel-Yes", "Yes.") == "hell yes"

    def test_prefix_alias(self):
        assert normalize("SB Slush Slasher", "Salomon").lower() == "spring break slush slasher"


class TestProfileDesignators:
    def test_contour_codes_always_stripped(self):
        assert normalize("Skunk Ape C2X", "Lib Tech") == "Skunk Ape"
        assert normalize("Orca C3 BTX", "Lib Tech") == "Orca"

    def test_profile_words_kept_for_variant_brands(self):
        assert normalize("Custom Camber Snowboard", "Burton") == "Custom Camber"
        assert normalize("Custom Flying V", "Burton") == "Custom Flying V"

    def test_profile_words_stripped_elsewhere(self):
        assert normalize("Algorythm Camber", "Ride") == "Algorythm"

    def test_keep_profile_flag(self):
        assert normalize("Skunk Ape C2X", "Lib Tech", keep_profile=True) == "Skunk Ape C2X"


class TestEdgeCases:
    @pytest.mark.parametrize("raw", ["", "   ", "Unknown"])
    def test_empty_or_unknown_returned_as_is(self, raw):
        assert normalize(raw, "Burton") == raw

    def test_none_input(self):
        assert normalize(None) == ""

    def test_never_empties_a_model(self):
        assert normalize("2025", None) == "2025"

    def test_idempotent_on_normalized_output(self):
        once = normalize("Burton Custom Snowboard 2026", "Burton")
        assert normalize(once, "Burton") == once

    def test_case_differences_collapse_after_casefold(self):
        assert normalize("custom snowboard", "Burton").casefold() == "custom"

    def test_model_numbers_are_not_years_or_lengths(self):
        assert normalize("K2000 ATSB LTD", None) == "K2000 ATSB LTD"


BRAND_RULE_TITLES = [
    ("Lib Tech Orca", "libtech"),
    ("Tech Skunk Ape", "Lib Tech"),
    ("Tech Deck", "Burton"),
    ("Lib Tech T.Rice Orca", "Lib Tech"),
    ("CAPiTA Equalizer By Jess Kimura", "CAPiTA"),
    ("Kazu Kokubo Pro Arthur Longo", "CAPiTA"),
    ("Equalizer By Jess Kimura", "Burton"),
    ("GNU Asym Ladies Choice C2X Snowboard - Women's 2025", "GNU"),
    ("Signature Series Pro", "Burton"),
    ("Yes. Hel-Yes", "Yes."),
    ("SB Slush Slasher", "Salomon"),
    ("Skunk Ape C2X", "Lib Tech"),
    ("Orca C3 BTX", "Lib Tech"),
    ("Custom Camber Snowboard", "Burton"),
    ("Algorythm Camber", "Ride"),
    ("Burton Women's Feelgood", "Burton"),
    ("Burton Men's Custom Snowboard 2025", "Burton"),
    ("Jones Flagship C2 Camber", "Jones"),
    ("Women's Lib Tech Orca", "Lib Tech"),
    ("K2000 ATSB LTD", None),
    ("2025", None),
]


class TestGenderBehindBrand:
    def test_mens_after_brand(self):
        assert normalize("Burton Men's Custom Snowboard 2025", "Burton") == "Custom"

    def test_womens_after_brand(self):
        assert normalize("Burton Women's Feelgood", "Burton") == "Feelgood"

    def test_brand_after_gender(self):
        assert normalize("Women's Lib Tech Orca", "Lib Tech") == "Orca"


class TestStackedProfileDesignators:
    def test_code_then_word(self):
        assert normalize("Jones Flagship C2 Camber", "Jones") == "Flagship"

    def test_word_then_code(self):
        assert normalize("Flagship Camber C2", "Jones") == "Flagship"

    def test_variant_brand_keeps_word_but_drops_code(self):
        assert normalize("Custom Camber C2", "Burton") == "Custom Camber"


class TestIdempotence:
    @pytest.mark.parametrize(
        "raw, brand",
        [(raw, brand) for raw, brand, _ in RETAIL_NOISE_CASES] + BRAND_RULE_TITLES,
    )
    def test_normalizing_twice_changes_nothing(self, raw, brand):
        once = normalize(raw, brand)
        assert normalize(once, brand) == once

    def test_rerun_is_traced_only_when_it_changes_something(self):
        result, trace = normalize_with_trace("Burton Men's Custom Snowboard 2025", "Burton")

        assert result == "Custom"
        assert trace[-1][1] == result
        assert ("strip-gender-prefix", "Custom") in trace


class TestTrace:
    def test_trace_starts_with_input_and_ends_with_result(self):
        result, trace = normalize_with_trace("Doughboy 185", None)

        assert result == "Doughboy"
        assert trace[0] == ("input", "Doughboy 185")
        assert trace[-1][1] == result
        assert ("strip-trailing-size", "Doughboy") in trace

    def test_trace_omits_steps_for_other_brands(self):
        _, trace = normalize_with_trace("Orca", "Burton")
        names = [name for name, _ in trace]

        assert "fix-libtech-brand-leak" not in names
        assert "strip-gnu-asym" not in names

    def test_trace_for_empty_input(self):
        result, trace = normalize_with_trace("", "Burton")
        assert result == ""
        assert trace == [("early-return", "")]


class TestRuleTable:
    def test_custom_table(self):
        table = parse_rule_table(
            {
                "brands": {"known": ["Burton"]},
                "model_aliases": {"exact": {"cstm": "custom"}},
            }
        )
        assert ModelNormalizer(table).normalize("Burton CSTM", "Burton") == "custom"

    def test_missing_brands_is_an_error(self):
        with pytest.raises(RuleTableError):
            parse_rule_table({"riders": {}})

    def test_alias_to_unknown_brand_is_an_error(self):
        with pytest.raises(RuleTableError):
            parse_rule_table({"brands": {"known": ["Burton"], "aliases": {"lib": "Lib Tech"}}})

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuleTableError):
            load_rule_table(tmp_path / "missing.yaml")

    def test_bad_regex(self):
        with pytest.raises(RuleTableError):
            parse_rule_table(
                {
                    "brands": {"known": ["Burton"]},
                    "corrections": [{"name": "broken", "pattern": "("}],
                }
            )

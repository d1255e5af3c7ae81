"""
Tests for the near-duplicate board key audit.
"""

from django.test import override_settings

from boards.services.key_audit import NearDuplicate, find_near_duplicate_keys


class TestFindNearDuplicateKeys:
    def test_flags_spacing_variants(self):
        pairs = find_near_duplicate_keys(
            ["burton|custom flying v|unisex", "burton|custom flyingv|unisex", "burton|custom|unisex"]
        )

        assert len(pairs) == 1
        assert {pairs[0].key_a, pairs[0].key_b} == {
            "burton|custom flying v|unisex",
            "burton|custom flyingv|unisex",
        }
        assert pairs[0].score >= 90

    def test_only_compares_within_brand_and_gender(self):
        assert find_near_duplicate_keys(["gnu|money|unisex", "gnu|money|womens"]) == []
        assert find_near_duplicate_keys(["gnu|money|unisex", "lib tech|money|unisex"]) == []

    def test_documented_variants_below_threshold(self):
        assert find_near_duplicate_keys(["gnu|money|unisex", "gnu|c money|unisex"]) == []

    def test_explicit_threshold(self):
        pairs = find_near_duplicate_keys(["gnu|money|unisex", "gnu|c money|unisex"], threshold=80)
        assert [(p.key_a, p.key_b) for p in pairs] == [("gnu|c money|unisex", "gnu|money|unisex")]

    @override_settings(BOARDS_KEY_AUDIT_THRESHOLD=50)
    def test_threshold_from_settings(self):
        assert find_near_duplicate_keys(["gnu|money|unisex", "gnu|c money|unisex"])

    def test_sorted_most_similar_first(self):
        pairs = find_near_duplicate_keys(
            [
                "ride|warpig|unisex",
                "ride|warpigg|unisex",
                "ride|war pig large|unisex",
                "ride|warpig large|unisex",
            ],
            threshold=70,
        )
        scores = [p.score for p in pairs]
        assert scores == sorted(scores, reverse=True)

    def test_malformed_keys_are_skipped(self):
        assert find_near_duplicate_keys(["not-a-key", "burton|custom|unisex"]) == []

    def test_duplicates_collapse(self):
        assert find_near_duplicate_keys(["burton|custom|unisex", "burton|custom|unisex"]) == []

    def test_result_type(self):
        pair = NearDuplicate("a|b|unisex", "a|c|unisex", 91.0)
        assert pair.score == 91.0

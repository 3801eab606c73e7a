"""
Tests for Strong's reference extraction.
"""
import pytest

from osis.references import GREEK_DEFAULT, HEBREW_DEFAULT, ReferencePolicy, extract_strongs


class TestExtractStrongs:
    """Tests for extract_strongs."""

    def test_single_reference(self):
        assert extract_strongs("strong:H07225") == ["H7225"]

    def test_leading_zeros_dropped(self):
        assert extract_strongs("strong:H0091") == ["H91"]

    def test_multiple_references_keep_order(self):
        assert extract_strongs("strong:H0853 strong:H01254") == ["H853", "H1254"]

    def test_duplicates_preserved(self):
        assert extract_strongs("strong:G3588 strong:G3588") == ["G3588", "G3588"]

    def test_lowercase_prefix_uppercased(self):
        assert extract_strongs("strong:g2316") == ["G2316"]

    def test_strongs_plural_prefix(self):
        assert extract_strongs("strongs:G2316") == ["G2316"]

    def test_bare_numbers(self):
        assert extract_strongs("H430") == ["H430"]

    def test_unprefixed_defaults_to_hebrew(self):
        assert extract_strongs("strong:0430") == ["H430"]

    def test_unprefixed_with_greek_policy(self):
        assert extract_strongs("strong:2316", GREEK_DEFAULT) == ["G2316"]

    def test_short_numbers_not_matched(self):
        """One and two digit numbers fall outside the accepted pattern."""
        assert extract_strongs("strong:H1") == []
        assert extract_strongs("strong:G40") == []

    @pytest.mark.parametrize("value", [None, "", "lemma.TR:theos"])
    def test_no_references(self, value):
        assert extract_strongs(value) == []

    def test_mixed_content(self):
        value = "lemma.TR:λογος strong:G3056"
        assert extract_strongs(value) == ["G3056"]


class TestReferencePolicy:
    """Tests for the default-prefix policy."""

    def test_defaults(self):
        assert HEBREW_DEFAULT.default_prefix == "H"
        assert GREEK_DEFAULT.default_prefix == "G"
        assert ReferencePolicy().default_prefix == "H"

    def test_invalid_prefix_rejected(self):
        with pytest.raises(ValueError):
            ReferencePolicy("X")

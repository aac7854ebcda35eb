"""
Tests for query normalization: comma handling, suffix splitting and modifier tags.
"""

from __future__ import annotations

import pytest

from folio_geo.models import ModifierType
from folio_geo.normalizer import QueryNormalizer, clean_text


@pytest.fixture(scope="module")
def normalizer(store):
    return QueryNormalizer(store)


class TestCleanText:
    def test_collapses_whitespace(self):
        assert clean_text("  San   Francisco  ") == "San Francisco"

    def test_collapses_comma_runs(self):
        assert clean_text("london , , on") == "london, on"
        assert clean_text("London,,,ON") == "London, ON"

    def test_strips_edge_commas(self):
        assert clean_text(",,London,,") == "London"
        assert clean_text(" , ") == ""

    def test_typographic_quotes(self):
        assert clean_text("St. John’s") == "St. John's"

    def test_non_text(self):
        assert clean_text(None) == ""
        assert clean_text(42) == "42"


class TestCommaSplit:
    def test_city_and_state(self, normalizer):
        q = normalizer.normalize("Frederick, Maryland")
        assert q.city_token == "Frederick"
        assert q.modifier_token == "Maryland"
        assert q.modifier_type is ModifierType.STATE

    def test_lowercase_abbreviation_after_comma(self, normalizer):
        q = normalizer.normalize("london , , on")
        assert (q.city_token, q.modifier_token) == ("london", "on")
        assert q.modifier_type is ModifierType.STATE

    def test_country_modifier(self, normalizer):
        q = normalizer.normalize("Toronto, Canada")
        assert q.modifier_type is ModifierType.COUNTRY

    def test_ambiguous_modifier(self, normalizer):
        assert normalizer.normalize("Columbus, Georgia").modifier_type is ModifierType.AMBIGUOUS
        assert normalizer.normalize("Frederick, MD").modifier_type is ModifierType.AMBIGUOUS

    def test_unknown_modifier_is_kept(self, normalizer):
        q = normalizer.normalize("Springfield, Narnia")
        assert q.city_token == "Springfield"
        assert q.modifier_token == "Narnia"
        assert q.modifier_type is ModifierType.NONE

    def test_multiple_commas_pick_first_known_segment(self, normalizer):
        q = normalizer.normalize("London, ON, Canada")
        assert (q.city_token, q.modifier_token) == ("London", "ON")
        q = normalizer.normalize("London, Downtown, Canada")
        assert (q.city_token, q.modifier_token) == ("London", "Canada")

    def test_multiple_commas_none_known(self, normalizer):
        q = normalizer.normalize("Old, Town, Square")
        assert q.city_token == "Old Town Square"
        assert q.modifier_token is None


class TestSuffixSplit:
    def test_full_state_name(self, normalizer):
        q = normalizer.normalize("Frederick Maryland")
        assert (q.city_token, q.modifier_token) == ("Frederick", "Maryland")
        assert q.modifier_type is ModifierType.STATE

    def test_uppercase_abbreviation(self, normalizer):
        q = normalizer.normalize("Paris TX")
        assert (q.city_token, q.modifier_token) == ("Paris", "TX")

    def test_lowercase_abbreviation_with_matching_place(self, normalizer):
        q = normalizer.normalize("frederick md")
        assert (q.city_token, q.modifier_token) == ("frederick", "md")
        q = normalizer.normalize("london on")
        assert (q.city_token, q.modifier_token) == ("london", "on")
        assert q.modifier_type is ModifierType.STATE

    def test_lowercase_abbreviation_without_matching_place(self, normalizer):
        # No Boston in Maryland, so "md" stays part of the city text
        q = normalizer.normalize("Boston md")
        assert q.city_token == "Boston md"
        assert q.modifier_token is None

    def test_longest_match_wins(self, normalizer):
        q = normalizer.normalize("Chicago United States of America")
        assert q.city_token == "Chicago"
        assert q.modifier_token == "United States of America"
        assert q.modifier_type is ModifierType.COUNTRY

    def test_multi_word_city(self, normalizer):
        q = normalizer.normalize("Saint Denis France")
        assert (q.city_token, q.modifier_token) == ("Saint Denis", "France")

    def test_remainder_must_be_non_empty(self, normalizer):
        q = normalizer.normalize("Georgia")
        assert q.city_token == "Georgia"
        assert q.modifier_type is ModifierType.NONE

    def test_no_known_suffix(self, normalizer):
        q = normalizer.normalize("Tokyo")
        assert q.city_token == "Tokyo"
        assert q.modifier_token is None

    def test_trailing_punctuation(self, normalizer):
        q = normalizer.normalize("Frederick Maryland!")
        assert q.modifier_token == "Maryland"


class TestTrivialInput:
    @pytest.mark.parametrize("value", [None, "", "   ", ",,,", " , , "])
    def test_empty(self, normalizer, value):
        q = normalizer.normalize(value)
        assert q.city_token == ""
        assert q.modifier_token is None
        assert q.modifier_type is ModifierType.NONE

    def test_non_text(self, normalizer):
        q = normalizer.normalize(12345)
        assert q.city_token == "12345"
        assert q.raw_query == "12345"
        assert q.modifier_type is ModifierType.NONE

    def test_raw_query_preserved(self, normalizer):
        assert normalizer.normalize("  london , , on ").raw_query == "  london , , on "


class TestInvariants:
    QUERIES = [
        "Frederick, Maryland",
        "Frederick Maryland",
        "london , , on",
        ",,London,,,ON,,",
        "London, ON, Canada",
        "Old, Town, Square",
        "Springfield, Narnia",
        "Paris TX",
        "frederick md",
        "london on",
        "Tokyo",
        "a,,,,b,,,,c",
    ]

    @pytest.mark.parametrize("text", QUERIES)
    def test_never_two_commas(self, normalizer, text):
        rendered = normalizer.normalize(text).text
        assert ",," not in rendered.replace(" ", "")
        assert rendered.count(",") <= 1

    @pytest.mark.parametrize("text", QUERIES)
    def test_idempotent(self, normalizer, text):
        once = normalizer.normalize(text)
        twice = normalizer.normalize(once.text)
        assert twice.city_token == once.city_token
        assert twice.modifier_token == once.modifier_token
        assert twice.modifier_type == once.modifier_type

    def test_query_is_immutable(self, normalizer):
        q = normalizer.normalize("Tokyo")
        with pytest.raises(AttributeError):
            q.city_token = "Osaka"

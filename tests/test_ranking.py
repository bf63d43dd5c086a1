"""Tests for cover-density ranking and strategy selection."""

import pytest
from storefront.search.query import QueryTerm
from storefront.search.ranking import (
    NORM_LENGTH,
    NORM_RANK_PLUS_ONE,
    BrowseAll,
    ExactMatch,
    FuzzyMatch,
    effective_vector,
    rank_cd,
    select_strategy,
)
from storefront.search.text import get_normalizer
from storefront.search.vector import SearchVector


def en(word):
    return get_normalizer("en").lexeme(word)


class TestRankCd:
    """Test cases for rank_cd."""

    def test_single_hit_scores_its_weight(self):
        query = QueryTerm.parse("ruby", "en")

        assert rank_cd(SearchVector({en("ruby"): [(1, "A")]}), query) == pytest.approx(1.0)
        assert rank_cd(SearchVector({en("ruby"): [(1, "B")]}), query) == pytest.approx(0.4)
        assert rank_cd(SearchVector({en("ruby"): [(1, "D")]}), query) == pytest.approx(0.1)

    def test_adjacent_cover(self):
        vector = SearchVector({en("red"): [(1, "A")], en("ruby"): [(2, "B")]})
        query = QueryTerm.parse("red ruby", "en")

        assert rank_cd(vector, query) == pytest.approx(2 / 3.5)

    def test_distant_terms_score_lower(self):
        query = QueryTerm.parse("red ruby", "en")
        near = SearchVector({en("red"): [(1, "A")], en("ruby"): [(2, "A")]})
        far = SearchVector({en("red"): [(1, "A")], en("ruby"): [(10, "A")]})

        assert rank_cd(near, query) == pytest.approx(1.0)
        assert rank_cd(far, query) == pytest.approx(1 / 9)

    def test_repeated_covers_add_up(self):
        query = QueryTerm.parse("ruby", "en")
        vector = SearchVector({en("ruby"): [(1, "A"), (5, "A")]})
        assert rank_cd(vector, query) == pytest.approx(2.0)

    def test_no_hit_scores_zero(self):
        query = QueryTerm.parse("sapphire", "en")
        assert rank_cd(SearchVector({en("ruby"): [(1, "A")]}), query) == 0.0

    def test_normalization_flags(self):
        query = QueryTerm.parse("ruby", "en")
        vector = SearchVector({en("ruby"): [(1, "A")], en("red"): [(2, "B")]})

        assert rank_cd(vector, query, normalization=NORM_RANK_PLUS_ONE) == pytest.approx(0.5)
        assert rank_cd(vector, query, normalization=NORM_LENGTH) == pytest.approx(0.5)


class TestStrategies:
    """Test cases for the ranking strategies."""

    def test_exact_match_scores_name_hit(self, make_gemstone):
        gemstone = make_gemstone("RB-0001", "ruby", "red")

        assert ExactMatch(QueryTerm.parse("ruby", "en")).score(gemstone) == pytest.approx(1.0)
        assert ExactMatch(QueryTerm.parse("sapphire", "en")).score(gemstone) is None

    def test_exact_match_russian_vector(self, make_gemstone):
        gemstone = make_gemstone("RB-0001", "ruby", "red", russian_names={"type": "Рубин", "color": "Красный"})

        assert ExactMatch(QueryTerm.parse("рубин", "ru")).score(gemstone) == pytest.approx(1.0)
        assert ExactMatch(QueryTerm.parse("красный", "ru")).score(gemstone) == pytest.approx(0.4)

    def test_description_vector_only_when_requested(self, make_gemstone):
        gemstone = make_gemstone("RB-0001", technical_description_en="Silk inclusions visible")
        query = QueryTerm.parse("silk", "en")

        assert ExactMatch(query).score(gemstone) is not None
        assert ExactMatch(query, include_descriptions=True).score(gemstone) is not None

        plain = make_gemstone("RB-0002", promotional_text="Heirloom quality")
        query = QueryTerm.parse("heirloom", "en")
        assert ExactMatch(query).score(plain) is None
        assert ExactMatch(query, include_descriptions=True).score(plain) > 0

    def test_effective_vector_appends_descriptions(self, make_gemstone):
        gemstone = make_gemstone("RB-0001", promotional_text="Heirloom quality")

        assert en("heirloom") not in effective_vector(gemstone, "en", False)
        assert en("heirloom") in effective_vector(gemstone, "en", True)

    def test_fuzzy_threshold_is_exclusive(self, make_gemstone):
        gemstone = make_gemstone("RB-0001")

        assert FuzzyMatch("x", similarity_fn=lambda a, b: 0.3).score(gemstone) is None
        assert FuzzyMatch("x", similarity_fn=lambda a, b: 0.30001).score(gemstone) == pytest.approx(0.30001)

    def test_fuzzy_uses_best_field(self, make_gemstone):
        gemstone = make_gemstone("DM-0004", "diamond", "white", description="Brilliant round stone")

        assert FuzzyMatch("diamnod").score(gemstone) == pytest.approx(4 / 12)
        assert FuzzyMatch("DM-0004").score(gemstone) == pytest.approx(1.0)
        assert FuzzyMatch("zzzz").score(gemstone) is None

    def test_browse_all_scores_zero(self, make_gemstone):
        assert BrowseAll().score(make_gemstone("RB-0001")) == 0.0


class TestSelectStrategy:
    """Test cases for select_strategy."""

    def test_blank_query_browses(self):
        for text in (None, "", "   "):
            assert isinstance(select_strategy(text, "en"), BrowseAll)

    def test_stop_words_only_browses(self):
        assert isinstance(select_strategy("the of", "en"), BrowseAll)

    def test_fuzzy_flag(self):
        strategy = select_strategy("  diamnod ", "en", use_fuzzy=True)

        assert isinstance(strategy, FuzzyMatch)
        assert strategy.fuzzy is True
        assert strategy.text == "diamnod"

    def test_exact_by_default(self):
        strategy = select_strategy("ruby", "en", include_descriptions=True)

        assert isinstance(strategy, ExactMatch)
        assert strategy.fuzzy is False
        assert strategy.include_descriptions is True
        assert strategy.query.language == "en"

"""Tests for search filters and their composition."""

from sqlalchemy import select
from storefront.models.gemstone import Gemstone
from storefront.schemas.search import SearchFilters, SearchRequest
from storefront.search.filters import VISIBILITY_PREDICATES, FilterCompositor


class TestSearchFilters:
    """Test cases for the SearchFilters schema."""

    def test_camel_case_keys(self):
        filters = SearchFilters.model_validate({
            "gemstoneTypes": ["ruby"],
            "minPrice": 100,
            "inStockOnly": True,
            "hasAIAnalysis": True,
            "useFuzzy": True,
        })

        assert filters.gemstone_types == ["ruby"]
        assert filters.min_price == 100
        assert filters.in_stock_only is True
        assert filters.has_ai_analysis is True
        assert filters.use_fuzzy is True

    def test_unknown_keys_are_ignored(self):
        filters = SearchFilters.model_validate({"sortBy": "price", "colors": ["red"]})
        assert filters.colors == ["red"]
        assert not hasattr(filters, "sortBy")

    def test_empty_list_is_absent(self):
        filters = SearchFilters.model_validate({"gemstoneTypes": [], "origins": []})

        assert filters.gemstone_types is None
        assert filters.origins is None

    def test_to_payload_drops_unset_constraints(self):
        filters = SearchFilters.model_validate({"gemstoneTypes": ["ruby"], "inStockOnly": True, "colors": []})
        assert filters.to_payload() == {"gemstoneTypes": ["ruby"], "inStockOnly": True}

    def test_null_filters_in_request(self):
        for body in ({"query": "ruby", "filters": None}, {"query": "ruby"}):
            request = SearchRequest.model_validate(body)
            assert request.filters == SearchFilters(), f"Failed for {body}"


class TestFilterCompositor:
    """Test cases for FilterCompositor."""

    def test_no_filters_leaves_visibility_only(self):
        for raw in ({}, {"gemstoneTypes": []}, {"inStockOnly": False}, {"unknown": 1}):
            predicates = FilterCompositor(SearchFilters.model_validate(raw)).predicates()
            assert [p.name for p in predicates] == [p.name for p in VISIBILITY_PREDICATES], f"Failed for {raw}"

    def test_visibility_rules(self, make_gemstone):
        compositor = FilterCompositor()

        assert compositor.matches(make_gemstone("RB-0001"))
        assert not compositor.matches(make_gemstone("RB-0002", price_amount=0))
        assert not compositor.matches(make_gemstone("RB-0003", primary_image_url=None))

    def test_visibility_can_be_disabled(self, make_gemstone):
        compositor = FilterCompositor(include_visibility=False)

        assert compositor.predicates() == []
        assert compositor.matches(make_gemstone("RB-0002", price_amount=0))

    def test_categorical_filters_match_codes(self, make_gemstone):
        ruby = make_gemstone("RB-0001", "ruby", "red", type_code="ruby", color_code="red")
        sapphire = make_gemstone("SP-0002", "sapphire", "blue")
        compositor = FilterCompositor(SearchFilters(gemstone_types=["ruby", "emerald"]))

        assert compositor.matches(ruby)
        assert not compositor.matches(sapphire)

    def test_range_filters(self, make_gemstone):
        gemstone = make_gemstone("RB-0001", price_amount=50000, weight_carats=1.5)
        test_cases = [
            ({"minPrice": 50000}, True),
            ({"minPrice": 50001}, False),
            ({"maxPrice": 50000}, True),
            ({"maxPrice": 49999}, False),
            ({"minWeight": 1.5, "maxWeight": 1.5}, True),
            ({"minWeight": 2}, False),
            ({"maxWeight": 1}, False),
        ]

        for raw, expected in test_cases:
            compositor = FilterCompositor(SearchFilters.model_validate(raw))
            assert compositor.matches(gemstone) is expected, f"Failed for {raw}"

    def test_flag_filters(self, make_gemstone):
        rich = make_gemstone("RB-0001", images=1, certified=True, ai_analyzed=True, origin="Myanmar")
        bare = make_gemstone("RB-0002", in_stock=False)
        test_cases = [
            {"inStockOnly": True},
            {"hasImages": True},
            {"hasCertification": True},
            {"hasAIAnalysis": True},
            {"origins": ["Myanmar", "Thailand"]},
        ]

        for raw in test_cases:
            compositor = FilterCompositor(SearchFilters.model_validate(raw))
            assert compositor.matches(rich), f"Failed for {raw}"
            assert not compositor.matches(bare), f"Failed for {raw}"

    def test_clauses_render_sql(self):
        compositor = FilterCompositor(SearchFilters(gemstone_types=["ruby"], in_stock_only=True))
        rendered = [str(clause) for clause in compositor.clauses()]

        assert any("price_amount >" in sql for sql in rendered)
        assert any("primary_image_url IS NOT NULL" in sql for sql in rendered)
        assert any("type_code IN" in sql for sql in rendered)
        assert any("in_stock IS" in sql for sql in rendered)

    def test_apply_adds_where_clause(self):
        statement = FilterCompositor(SearchFilters(colors=["red"])).apply(select(Gemstone))
        assert "color_code IN" in str(statement)

        bare = select(Gemstone)
        assert FilterCompositor(include_visibility=False).apply(bare) is bare

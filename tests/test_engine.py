"""Tests for the in-process search engine."""

import uuid
import pytest
from storefront.schemas.search import SearchFilters
from storefront.search.engine import SearchEngine, paginate, sort_key


class TestOrdering:
    """Test cases for result ordering and pagination."""

    def setup_method(self):
        self.engine = SearchEngine()

    def test_sort_key_orders_by_score_then_newest_then_id(self, make_gemstone):
        older = make_gemstone("A-1", created_offset_days=5)
        newer = make_gemstone("A-2", created_offset_days=1)
        tie_low = make_gemstone("A-3", created_offset_days=3, id=uuid.UUID(int=1))
        tie_high = make_gemstone("A-4", created_offset_days=3, id=uuid.UUID(int=2))

        entries = [(0.5, older), (0.1, newer), (0.1, tie_high), (0.1, tie_low)]
        ordered = [g.serial_number for _, g in sorted(entries, key=sort_key)]

        assert ordered == ["A-1", "A-2", "A-3", "A-4"]

    def test_browse_returns_newest_first(self, catalog_gemstones):
        page = self.engine.search(catalog_gemstones, "")

        assert page.strategy == "browse"
        assert [item.gemstone.serial_number for item in page.items] == ["RB-0001", "SP-0002", "EM-0003", "DM-0004"]
        assert all(item.relevance_score == 0.0 for item in page.items)

    def test_pages_concatenate_to_full_ordering(self, make_gemstone):
        gemstones = [make_gemstone(f"GM-{i:04d}", created_offset_days=i) for i in range(7)]
        full = self.engine.search(gemstones, None, page_size=10)

        pages = [self.engine.search(gemstones, None, page=n, page_size=3) for n in (1, 2, 3)]
        stitched = [item.gemstone.serial_number for page in pages for item in page.items]

        assert stitched == [item.gemstone.serial_number for item in full.items]
        assert [len(page.items) for page in pages] == [3, 3, 1]
        assert all(page.total == 7 and page.total_pages == 3 for page in pages)
        assert all(item.total_count == 7 for item in pages[2].items)
        assert pages[0].has_next_page and not pages[0].has_prev_page
        assert pages[2].has_prev_page and not pages[2].has_next_page

    def test_page_past_the_end_is_empty(self, make_gemstone):
        gemstones = [make_gemstone(f"GM-{i:04d}") for i in range(2)]
        page = self.engine.search(gemstones, None, page=5, page_size=3)

        assert page.items == []
        assert page.total == 2

    def test_paginate_rejects_bad_arguments(self):
        with pytest.raises(ValueError):
            paginate([], 0, 10)
        with pytest.raises(ValueError):
            paginate([], 1, 0)


class TestSearchScenarios:
    """End-to-end searches over built vectors."""

    def setup_method(self):
        self.engine = SearchEngine()

    def test_russian_query_finds_translated_type(self, catalog_gemstones):
        page = self.engine.search(catalog_gemstones, "рубин")

        assert page.locale == "ru"
        assert page.strategy == "exact"
        assert [item.gemstone.serial_number for item in page.items] == ["RB-0001"]
        assert page.items[0].relevance_score > 0

    def test_english_query_finds_type(self, catalog_gemstones):
        page = self.engine.search(catalog_gemstones, "sapphire")

        assert page.locale == "en"
        assert [item.gemstone.serial_number for item in page.items] == ["SP-0002"]

    def test_name_hit_outranks_description_hit(self, make_gemstone):
        named = make_gemstone("RB-0001", "ruby", created_offset_days=5)
        described = make_gemstone("SP-0002", "spinel", description="Often mistaken for ruby", created_offset_days=1)

        page = self.engine.search([described, named], "ruby")

        assert [item.gemstone.serial_number for item in page.items] == ["RB-0001", "SP-0002"]
        assert page.items[0].relevance_score > page.items[1].relevance_score

    def test_filters_with_empty_query(self, catalog_gemstones):
        filters = SearchFilters.model_validate({"gemstoneTypes": ["ruby", "emerald"], "inStockOnly": True})
        page = self.engine.search(catalog_gemstones, "", filters=filters)

        assert [item.gemstone.serial_number for item in page.items] == ["RB-0001"]
        assert page.total == 1

    def test_hidden_gemstones_never_returned(self, make_gemstone):
        visible = make_gemstone("RB-0001")
        unpriced = make_gemstone("RB-0002", price_amount=0)
        no_image = make_gemstone("RB-0003", primary_image_url=None)

        for query in ("", "ruby"):
            page = self.engine.search([visible, unpriced, no_image], query)
            assert [item.gemstone.serial_number for item in page.items] == ["RB-0001"], f"Failed for {query!r}"

    def test_description_search(self, make_gemstone):
        gemstone = make_gemstone("RB-0001", promotional_text="An heirloom piece")

        assert self.engine.search([gemstone], "heirloom").total == 0
        assert self.engine.search([gemstone], "heirloom", include_descriptions=True).total == 1

        filters = SearchFilters(search_descriptions=True)
        assert self.engine.search([gemstone], "heirloom", filters=filters).total == 1

    def test_fuzzy_search(self, catalog_gemstones):
        page = self.engine.search(catalog_gemstones, "diamnod", filters=SearchFilters(use_fuzzy=True))

        assert page.used_fuzzy is True
        assert page.strategy == "fuzzy"
        assert [item.gemstone.serial_number for item in page.items] == ["DM-0004"]
        assert page.items[0].relevance_score == pytest.approx(4 / 12)

    def test_misspelling_without_fuzzy_finds_nothing(self, catalog_gemstones):
        page = self.engine.search(catalog_gemstones, "diamnod")

        assert page.total == 0
        assert page.used_fuzzy is False

    def test_stop_words_only_browses(self, catalog_gemstones):
        page = self.engine.search(catalog_gemstones, "the")

        assert page.strategy == "browse"
        assert page.total == len(catalog_gemstones)

    def test_explicit_locale_overrides_detection(self, catalog_gemstones):
        page = self.engine.search(catalog_gemstones, "ruby", locale="ru")

        # Latin words are stemmed with English rules in both vectors
        assert page.locale == "ru"
        assert [item.gemstone.serial_number for item in page.items] == ["RB-0001"]

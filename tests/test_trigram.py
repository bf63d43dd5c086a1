"""Tests for trigram similarity."""

import pytest
from storefront.search.trigram import SIMILARITY_THRESHOLD, is_similar, similarity, trigrams


class TestTrigrams:
    """Test cases for trigram extraction and similarity."""

    def test_trigrams_pad_each_word(self):
        assert trigrams("cat") == frozenset({"  c", " ca", "cat", "at "})
        assert trigrams("Cat") == trigrams("cat")
        assert trigrams("red-cat") == trigrams("red") | trigrams("cat")
        assert trigrams("") == frozenset()
        assert trigrams(None) == frozenset()

    def test_similarity_values(self):
        test_cases = [
            ("diamond", "diamond", 1.0),
            ("diamnod", "diamond", 4 / 12),
            ("rubby", "ruby", 4 / 7),
            ("ruby", "", 0.0),
            (None, "ruby", 0.0),
        ]

        for left, right, expected in test_cases:
            assert similarity(left, right) == pytest.approx(expected), f"Failed for {left!r}/{right!r}"

    def test_similarity_is_symmetric(self):
        assert similarity("sapphire", "saphire") == similarity("saphire", "sapphire")

    def test_threshold_is_exclusive(self):
        assert SIMILARITY_THRESHOLD == 0.3
        assert is_similar("diamnod", "diamond")
        assert is_similar("rubby", "ruby")
        assert not is_similar("emerald", "ruby")

from storefront.search.engine import RankedGemstone, SearchEngine, SearchPage
from storefront.search.filters import FilterCompositor, Predicate
from storefront.search.locale import detect_query_locale, normalize_locale
from storefront.search.maintainer import SearchVectorMaintainer
from storefront.search.query import QueryTerm
from storefront.search.ranking import BrowseAll, ExactMatch, FuzzyMatch, rank_cd, select_strategy
from storefront.search.suggestions import SuggestionEngine, VocabularyEntry
from storefront.search.trigram import SIMILARITY_THRESHOLD, similarity
from storefront.search.vector import SearchVector

__all__ = [
    "RankedGemstone",
    "SearchEngine",
    "SearchPage",
    "FilterCompositor",
    "Predicate",
    "detect_query_locale",
    "normalize_locale",
    "SearchVectorMaintainer",
    "QueryTerm",
    "BrowseAll",
    "ExactMatch",
    "FuzzyMatch",
    "rank_cd",
    "select_strategy",
    "SuggestionEngine",
    "VocabularyEntry",
    "SIMILARITY_THRESHOLD",
    "similarity",
    "SearchVector",
]

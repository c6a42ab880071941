"""
Resource Search

Relevance ranking, structured filters, stable sorting, pagination and
suggestions over the shared resource collection.
"""

from .engine import (
    SearchService,
    SearchFilters,
    calculate_relevance,
    matches_filters,
    sort_results,
    normalize_page,
    paginate,
    TITLE_WEIGHT,
    FILENAME_WEIGHT,
    SUBJECT_WEIGHT,
    DEFAULT_PAGE_SIZE,
    MAX_SUGGESTIONS,
)

__all__ = [
    "SearchService",
    "SearchFilters",
    "calculate_relevance",
    "matches_filters",
    "sort_results",
    "normalize_page",
    "paginate",
    "TITLE_WEIGHT",
    "FILENAME_WEIGHT",
    "SUBJECT_WEIGHT",
    "DEFAULT_PAGE_SIZE",
    "MAX_SUGGESTIONS",
]

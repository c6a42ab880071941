"""
Resource Search Engine

Turns a free-text query plus structured filters into a ranked, filtered,
paginated page of resources.

Pipeline:
1. Relevance: weighted, additive substring hits on title, filename, subject
2. Filters: subject, type, minimum rating (all optional, ANDed)
3. Sort: by rating, downloads or relevance; stable on ties
4. Paginate: 1-indexed pages, total count taken before slicing
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from peerlib.backends.base import ResourceStore
from peerlib.core.models import Resource, SearchPage, SearchResult

logger = logging.getLogger(__name__)


# Relevance weights
TITLE_WEIGHT = 3.0
FILENAME_WEIGHT = 2.0
SUBJECT_WEIGHT = 1.5
EMPTY_QUERY_RELEVANCE = 1.0

# Sort keys and order
SORT_BY_RATING = "rating"
SORT_BY_DOWNLOADS = "downloads"
SORT_BY_RELEVANCE = "relevance"
SORT_DESC = "desc"

DEFAULT_PAGE_SIZE = 10
MAX_SUGGESTIONS = 10


@dataclass
class SearchFilters:
    """Structured filters; empty values mean "no filter"."""
    subject: Optional[str] = None
    resource_type: Optional[str] = None
    min_rating: float = 0.0
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    page: int = 1
    page_size: Optional[int] = DEFAULT_PAGE_SIZE


def calculate_relevance(resource: Resource, query: str) -> float:
    """
    Score how well a resource matches a normalised (lower-cased) query.

    Returns EMPTY_QUERY_RELEVANCE for an empty query and 0.0 when nothing
    matches.
    """
    if not query:
        return EMPTY_QUERY_RELEVANCE

    relevance = 0.0
    if query in resource.title.lower():
        relevance += TITLE_WEIGHT
    if query in resource.filename.lower():
        relevance += FILENAME_WEIGHT
    if query in resource.subject.lower():
        relevance += SUBJECT_WEIGHT
    return relevance


def matches_filters(resource: Resource, filters: SearchFilters) -> bool:
    if filters.subject and resource.subject.lower() != filters.subject.lower():
        return False
    if filters.resource_type and resource.resource_type != filters.resource_type:
        return False
    if filters.min_rating > 0 and resource.average_rating < filters.min_rating:
        return False
    return True


def sort_results(
    results: List[SearchResult],
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None
) -> List[SearchResult]:
    """
    Return results sorted by the selected key.

    Ascending unless sort_order is "desc". Equal keys keep their input order
    in both directions.
    """
    if sort_by == SORT_BY_RATING:
        key = lambda r: r.resource.average_rating
    elif sort_by == SORT_BY_DOWNLOADS:
        key = lambda r: r.resource.download_count
    else:
        key = lambda r: r.relevance

    return sorted(results, key=key, reverse=(sort_order == SORT_DESC))


def normalize_page(page: Optional[int], page_size: Optional[int]):
    """Clamp page to >= 1; default an unset page size, clamp the rest to >= 1."""
    page = max(page or 1, 1)
    if not page_size:
        page_size = DEFAULT_PAGE_SIZE
    return page, max(page_size, 1)


def paginate(results: List[SearchResult], page: int, page_size: int) -> List[SearchResult]:
    offset = (page - 1) * page_size
    if offset >= len(results):
        return []
    return results[offset:offset + page_size]


class SearchService:
    """
    Query engine over an injected resource store.

    Every call takes a fresh snapshot of the collection from the store.
    """

    def __init__(self, store: ResourceStore):
        """
        Initialize search service.

        Args:
            store: Resource store (any ResourceStore implementation)
        """
        self.store = store

    def search(self, query: str = "", filters: Optional[SearchFilters] = None) -> SearchPage:
        """
        Run a ranked, filtered, paginated search.

        Args:
            query: Free text; matched case-insensitively as a substring
            filters: Optional structured filters, sort and page settings

        Returns:
            SearchPage with the requested slice and the filtered total
        """
        filters = filters or SearchFilters()
        query = (query or "").strip().lower()

        results = []
        for resource in self.store.list_resources():
            relevance = calculate_relevance(resource, query)
            if query and relevance == 0:
                continue
            if not matches_filters(resource, filters):
                continue
            results.append(SearchResult(
                resource=resource,
                available_peers=resource.peer_count,
                relevance=relevance,
            ))

        results = sort_results(results, filters.sort_by, filters.sort_order)
        total_count = len(results)

        page, page_size = normalize_page(filters.page, filters.page_size)
        page_results = paginate(results, page, page_size)

        logger.debug(
            f"Search '{query}': {total_count} matches, "
            f"page {page} returned {len(page_results)}"
        )

        return SearchPage(
            query=query,
            results=page_results,
            total_count=total_count,
            page=page,
            page_size=page_size,
        )

    def search_by_subject(self, subject: str) -> List[Resource]:
        """Resources whose subject equals the given one, ignoring case."""
        wanted = subject.lower()
        return [r for r in self.store.list_resources() if r.subject.lower() == wanted]

    def search_by_tag(self, tag: str) -> List[Resource]:
        """Resources carrying the given tag, ignoring case."""
        return [r for r in self.store.list_resources() if r.has_tag(tag)]

    def get_suggestions(self, partial: str) -> List[str]:
        """
        Suggest titles and subjects containing a partial string.

        Returns:
            Up to MAX_SUGGESTIONS distinct strings, sorted
        """
        partial = (partial or "").lower()
        seen = set()

        for resource in self.store.list_resources():
            if resource.title and partial in resource.title.lower():
                seen.add(resource.title)
            if resource.subject and partial in resource.subject.lower():
                seen.add(resource.subject)

        return sorted(seen)[:MAX_SUGGESTIONS]

"""Filter query builder - translate filter criteria into listing-query descriptors."""

from typing import Optional

from storefront.models.filters import ListingFilters, QueryDescriptor
from storefront.utils.config import StorefrontConfig


def _present(value) -> bool:
    """Presence test: None and "" are absent, 0 is a real value."""
    return value is not None and value != ""


def build_query(
    filters: Optional[ListingFilters] = None,
    page: int = 1,
    page_size: int = StorefrontConfig.DEFAULT_PAGE_SIZE
) -> QueryDescriptor:
    """
    Build a paginated listing query from filter criteria.

    Only dimensions that are present are included. Location is forwarded as
    independent lat/lng/radius values; the backend applies the radius.
    """
    filters = filters or ListingFilters()
    query: dict = {"page": page, "per_page": page_size}

    if _present(filters.category):
        query["category"] = filters.category
    if _present(filters.min_price):
        query["min_price"] = filters.min_price
    if _present(filters.max_price):
        query["max_price"] = filters.max_price
    if _present(filters.min_rating):
        query["min_rating"] = filters.min_rating
    if _present(filters.date):
        query["date_from"] = filters.date
    if filters.location is not None:
        query["lat"] = filters.location.lat
        query["lng"] = filters.location.lng
        query["radius"] = filters.location.radius

    return QueryDescriptor(**query)


def build_search_query(term: str, page_size: int = StorefrontConfig.SEARCH_PAGE_SIZE) -> QueryDescriptor:
    """
    Build a free-text search query.

    Search is its own mode: one unpaginated request carrying only the term.
    Structured filters are not combined with it.
    """
    return QueryDescriptor(page=1, per_page=page_size, search=term.strip())


def count_active_filters(filters: Optional[ListingFilters]) -> int:
    """Number of constrained dimensions; each price bound counts on its own."""
    if filters is None:
        return 0

    count = 0
    if _present(filters.category):
        count += 1
    if _present(filters.min_price):
        count += 1
    if _present(filters.max_price):
        count += 1
    if _present(filters.min_rating):
        count += 1
    if _present(filters.date):
        count += 1
    if filters.location is not None:
        count += 1
    return count

"""Listing browser - filtered, paginated listing results with load-more accumulation."""

from typing import Any, Callable, Optional

from storefront.models.filters import ListingFilters, ListingPage, QueryDescriptor
from storefront.models.listing import Listing
from storefront.models.notice import Notice, NoticeKind
from storefront.services.filter_query import build_query, build_search_query, count_active_filters
from storefront.utils.config import StorefrontConfig
from storefront.utils.logging import correlation_context, get_structured_logger, sanitize_error

logger = get_structured_logger(__name__)


class ListingBrowser:
    """
    Holds the current filters or search term and the accumulated results.

    A filter or search change replaces the results; ``load_more`` appends the
    next page. While a search term is set, filters are ignored and the single
    search page disables load-more.

    ``listing_service`` must provide ``async query_listings(descriptor) -> ListingPage``.
    """

    def __init__(
        self,
        listing_service: Any,
        notify: Optional[Callable[[Notice], None]] = None,
        page_size: int = StorefrontConfig.DEFAULT_PAGE_SIZE,
    ):
        self._service = listing_service
        self._notify = notify
        self.page_size = page_size

        self.filters = ListingFilters()
        self.search_term = ""
        self.listings: list[Listing] = []
        self.total = 0
        self.page = 1
        self.has_more = True
        self.is_loading = False
        self.is_loading_more = False
        self.notice: Optional[Notice] = None
        # Bumped on every replacing load so late pages are dropped
        self._generation = 0

    @property
    def active_filter_count(self) -> int:
        return count_active_filters(self.filters)

    def query_for(self, page: int) -> QueryDescriptor:
        if self.search_term.strip():
            return build_search_query(self.search_term)
        return build_query(self.filters, page, self.page_size)

    async def apply_filters(self, filters: Optional[ListingFilters]) -> bool:
        self.filters = filters or ListingFilters()
        return await self.refresh()

    async def search(self, term: Optional[str]) -> bool:
        self.search_term = term or ""
        return await self.refresh()

    async def refresh(self) -> bool:
        """Load the first page, replacing current results."""
        self._generation += 1
        return await self._load(1, reset=True)

    async def load_more(self) -> bool:
        """Append the next page. No-op when nothing more is available or a load is running."""
        if not self.has_more or self.is_loading or self.is_loading_more:
            return False
        return await self._load(self.page + 1, reset=False)

    async def _load(self, page: int, reset: bool) -> bool:
        generation = self._generation
        descriptor = self.query_for(page)

        if reset:
            self.is_loading = True
        else:
            self.is_loading_more = True

        with correlation_context():
            try:
                result: ListingPage = await self._service.query_listings(descriptor)
            except Exception as e:
                logger.error(
                    "Failed to load listings",
                    page=page,
                    search=descriptor.is_search,
                    error=sanitize_error(e)
                )
                if generation == self._generation:
                    if reset:
                        self.listings = []
                        self.total = 0
                        self.has_more = False
                    self.notice = Notice(
                        kind=NoticeKind.LISTINGS_FAILED,
                        message="Failed to load listings.",
                        detail=sanitize_error(e),
                    )
                    if self._notify is not None:
                        self._notify(self.notice)
                return False
            finally:
                # A superseded refresh leaves is_loading to the newer one
                if not reset:
                    self.is_loading_more = False
                elif generation == self._generation:
                    self.is_loading = False

        if generation != self._generation:
            logger.debug("Dropping stale listing page", page=page)
            return False

        if descriptor.is_search:
            result = ListingPage(
                listings=result.listings,
                total=len(result.listings),
                page=1,
                per_page=len(result.listings),
                has_more=False,
            )

        self.notice = None
        if reset:
            self.listings = list(result.listings)
        else:
            self.listings = self.listings + list(result.listings)
        self.total = result.total
        self.page = result.page
        self.has_more = result.has_more

        logger.info(
            "Listings loaded",
            page=self.page,
            received=len(result.listings),
            accumulated=len(self.listings),
            has_more=self.has_more,
            active_filters=self.active_filter_count,
            search=descriptor.is_search
        )
        return True

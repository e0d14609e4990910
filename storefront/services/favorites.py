"""Favorites coordinator - local favorites set kept in step with the remote store."""

import asyncio
from typing import Any, Callable, List, Optional

from storefront.models.listing import Listing
from storefront.models.notice import Notice, NoticeKind
from storefront.utils.errors import FavoritesSyncError
from storefront.utils.logging import correlation_context, get_structured_logger, sanitize_error

logger = get_structured_logger(__name__)

# Client errors meaning the server already holds the requested state, per intent
ALREADY_ADDED_STATUSES = (400, 409)
ALREADY_REMOVED_STATUSES = (400, 404)

FavoritesListener = Callable[[frozenset], None]


class FavoritesCoordinator:
    """
    Optimistic favorites set.

    Toggles apply locally first, then call the remote store. A failure whose
    status says "already done" keeps the local change (400/409 for an add,
    400/404 for a remove); any other failure reverts it and raises an auth
    prompt notice. Nothing is retried.

    ``favorites_service`` must provide async ``list_favorites``,
    ``add_favorite``, ``remove_favorite`` and ``favorite_listings``.
    ``auth_gate``, when given, must provide ``require_auth(action) -> bool``.
    """

    def __init__(
        self,
        favorites_service: Any,
        auth_gate: Any = None,
        notify: Optional[Callable[[Notice], None]] = None,
    ):
        self._service = favorites_service
        self._auth_gate = auth_gate
        self._notify = notify
        self._ids: set[str] = set()
        self._listeners: list[FavoritesListener] = []
        self.notice: Optional[Notice] = None

    def list(self) -> frozenset:
        """Snapshot of favorited listing ids."""
        return frozenset(self._ids)

    def is_favorite(self, listing_id: str) -> bool:
        return str(listing_id) in self._ids

    def subscribe(self, listener: FavoritesListener) -> Callable[[], None]:
        """Call ``listener`` with a snapshot after every local change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snapshot = self.list()
        for listener in list(self._listeners):
            listener(snapshot)

    def _set_membership(self, listing_id: str, present: bool) -> None:
        if present:
            self._ids.add(listing_id)
        else:
            self._ids.discard(listing_id)
        self._publish()

    def _raise_notice(self, notice: Notice) -> None:
        self.notice = notice
        if self._notify is not None:
            self._notify(notice)

    async def initialize(self) -> frozenset:
        """Seed the local set from the remote store. Failures leave it empty."""
        try:
            ids = await self._service.list_favorites()
        except Exception as e:
            logger.info("Favorites unavailable, starting with an empty set", error=sanitize_error(e))
            ids = []

        self._ids = {str(listing_id) for listing_id in ids}
        self._publish()
        logger.debug("Favorites initialized", favorites_count=len(self._ids))
        return self.list()

    async def toggle(self, listing_id: str) -> None:
        listing_id = str(listing_id)

        if self._auth_gate is not None and not self._auth_gate.require_auth("wishlist"):
            return

        adding = listing_id not in self._ids
        self._set_membership(listing_id, adding)

        with correlation_context():
            try:
                if adding:
                    await self._service.add_favorite(listing_id)
                else:
                    await self._service.remove_favorite(listing_id)
            except Exception as e:
                self._handle_toggle_failure(listing_id, adding, e)
                return

            logger.info("Favorite updated", listing_id=listing_id, action="add" if adding else "remove")

    def _handle_toggle_failure(self, listing_id: str, adding: bool, error: Exception) -> None:
        status_code = getattr(error, "status_code", None)
        already_done = ALREADY_ADDED_STATUSES if adding else ALREADY_REMOVED_STATUSES

        if status_code in already_done:
            logger.info(
                "Favorite already in requested state",
                listing_id=listing_id,
                action="add" if adding else "remove",
                status_code=status_code
            )
            return

        # The server never recorded the change
        self._set_membership(listing_id, not adding)
        logger.warning(
            "Favorite update failed, reverted",
            listing_id=listing_id,
            action="add" if adding else "remove",
            status_code=status_code,
            error=sanitize_error(error)
        )
        self._raise_notice(Notice(
            kind=NoticeKind.AUTH_REQUIRED,
            message="You must be logged in to save favorites.",
            detail=sanitize_error(error),
        ))

    async def clear_all(self) -> bool:
        """
        Remove every favorite with independent, concurrent removals.

        On partial failure one aggregate notice is raised and the local set is
        left untouched, so it may include ids the server already removed.
        """
        ids = sorted(self._ids)
        if not ids:
            return True

        results = await asyncio.gather(
            *(self._service.remove_favorite(listing_id) for listing_id in ids),
            return_exceptions=True
        )
        failed = [listing_id for listing_id, result in zip(ids, results) if isinstance(result, Exception)]

        if failed:
            error = FavoritesSyncError(failed)
            logger.error(
                "Failed to clear favorites",
                requested_count=len(ids),
                failed_count=len(failed),
                error=sanitize_error(error)
            )
            self._raise_notice(Notice(
                kind=NoticeKind.FAVORITES_FAILED,
                message="Failed to clear your wishlist.",
                detail=sanitize_error(error),
            ))
            return False

        self._ids.clear()
        self._publish()
        logger.info("Favorites cleared", removed_count=len(ids))
        return True

    async def favorite_listings(self) -> List[Listing]:
        """Full listings for the wishlist; the local set is resynced from the result."""
        try:
            listings = await self._service.favorite_listings()
        except Exception as e:
            logger.error("Failed to load favorite listings", error=sanitize_error(e))
            self._raise_notice(Notice(
                kind=NoticeKind.LISTINGS_FAILED,
                message="Failed to load your wishlist.",
                detail=sanitize_error(e),
            ))
            return []

        self._ids = {listing.id for listing in listings}
        self._publish()
        return listings

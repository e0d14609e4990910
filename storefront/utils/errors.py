"""Error handling utilities."""

from typing import Iterable, Optional


class StorefrontError(Exception):
    """Base exception for the storefront pipeline."""
    pass


class TransportError(StorefrontError):
    """Non-success response (or network failure) from a backend service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_auth_error(self) -> bool:
        """True for 401/403 responses."""
        return self.status_code in (401, 403)

    @property
    def is_client_error(self) -> bool:
        """True for any 4xx response."""
        return self.status_code is not None and 400 <= self.status_code < 500


class ListingNotFoundError(StorefrontError):
    """Single-listing lookup for a stale or invalid id."""
    pass


class FavoritesSyncError(StorefrontError):
    """One or more favorite removals failed during a bulk clear."""

    def __init__(self, failed_ids: Iterable[str]):
        self.failed_ids = list(failed_ids)
        super().__init__(f"Failed to remove {len(self.failed_ids)} favorite(s): {', '.join(self.failed_ids)}")

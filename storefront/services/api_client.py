"""Storefront API client - listing, reservation and favorites services over the backend JSON API."""

from typing import Any, Callable, Optional

import httpx

from storefront.models.filters import ListingPage, QueryDescriptor
from storefront.models.listing import Listing
from storefront.models.reservation import Reservation, ReservationRequest
from storefront.services.listing_normalizer import normalize_listing, normalize_reservation
from storefront.utils.config import StorefrontConfig
from storefront.utils.errors import ListingNotFoundError, TransportError
from storefront.utils.logging import get_correlation_id, get_structured_logger, sanitize_error, timed
from storefront.utils.logging_config import LoggingConfig

logger = get_structured_logger(__name__)

TokenProvider = Callable[[], Optional[str]]


def to_wire_id(listing_id: str) -> Any:
    """Backend ids are numeric; send them as numbers when they look like one."""
    return int(listing_id) if str(listing_id).isdigit() else listing_id


class StorefrontApiClient:
    """
    Async client for the storefront backend.

    Public listing endpoints are anonymous; reservation and favorites
    endpoints send the bearer token returned by ``token_provider``.
    Any non-success status raises TransportError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or StorefrontConfig.API_BASE_URL).rstrip("/")
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else StorefrontConfig.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "StorefrontApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Storefront API operation error",
                error=sanitize_error(exc_val),
                type=exc_type.__name__
            )
        await self.aclose()
        return False

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, authenticated: bool) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}

        correlation_id = get_correlation_id()
        if correlation_id:
            headers[LoggingConfig.LOG_CORRELATION_ID_HEADER] = correlation_id

        if authenticated and self._token_provider is not None:
            token = self._token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        authenticated: bool = False,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._headers(authenticated),
            )
        except httpx.HTTPError as e:
            logger.warning("Storefront API request failed", method=method, path=path, error=sanitize_error(e))
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            logger.warning(
                "Storefront API returned error status",
                method=method,
                path=path,
                status_code=response.status_code
            )
            raise TransportError(f"HTTP {response.status_code}", status_code=response.status_code)

        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {response.request.url}: {e}") from e

    # Listing-query service
    @timed("query_listings")
    async def query_listings(self, descriptor: QueryDescriptor) -> ListingPage:
        """Fetch one page of listings matching the descriptor."""
        response = await self._request("GET", "/user/listings", params=descriptor.to_params())
        body = self._json(response)
        if not isinstance(body, dict):
            raise TransportError("Unexpected listings payload")

        listings = [normalize_listing(raw) for raw in body.get("data") or []]
        return ListingPage(
            listings=listings,
            total=body.get("total") or len(listings),
            page=body.get("page") or descriptor.page,
            per_page=body.get("per_page") or descriptor.per_page,
            has_more=bool(body.get("has_more")),
        )

    async def lookup_listing(self, listing_id: str) -> Optional[Listing]:
        """Fetch one listing; returns None when the backend does not have it."""
        try:
            return await self.get_listing(listing_id)
        except ListingNotFoundError:
            return None

    async def get_listing(self, listing_id: str) -> Listing:
        """Fetch one listing; raises ListingNotFoundError on a non-success status."""
        try:
            response = await self._request("GET", f"/user/items/{listing_id}")
        except TransportError as e:
            if e.status_code is None:
                raise
            raise ListingNotFoundError(f"Listing not found: {listing_id}") from e
        return normalize_listing(self._json(response))

    # Reservation-creation service
    async def create_reservation(self, request: ReservationRequest) -> Reservation:
        """Commit a reservation."""
        response = await self._request(
            "POST",
            "/user/reservations",
            authenticated=True,
            json={
                "listing_id": to_wire_id(request.listing_id),
                "slot_id": request.slot_id,
                "date_time_reservation": f"{request.date}T{request.time}:00Z",
                "number_of_participants": request.participants,
                "special_requests": request.special_requests,
                "payment_token": request.payment_token,
            },
        )
        return normalize_reservation(self._json(response))

    async def list_reservations(self) -> list[Reservation]:
        response = await self._request("GET", "/user/reservations", authenticated=True)
        return [normalize_reservation(raw) for raw in self._json(response) or []]

    async def cancel_reservation(self, reservation_id: str) -> None:
        await self._request("POST", f"/user/reservations/{reservation_id}/cancel", authenticated=True)

    # Favorites service
    async def list_favorites(self) -> list[str]:
        """IDs of the current user's favorite listings."""
        response = await self._request("GET", "/user/favorites", authenticated=True)
        ids = []
        for fav in self._json(response) or []:
            listing_id = fav.get("listing_id") or (fav.get("listing") or {}).get("listing_id")
            if listing_id is not None:
                ids.append(str(listing_id))
        return ids

    async def add_favorite(self, listing_id: str) -> None:
        await self._request(
            "POST",
            "/user/favorites",
            authenticated=True,
            json={"listing_id": to_wire_id(listing_id)},
        )

    async def remove_favorite(self, listing_id: str) -> None:
        await self._request("DELETE", f"/user/favorites/{listing_id}", authenticated=True)

    async def favorite_listings(self) -> list[Listing]:
        """Full listings for the current user's favorites."""
        response = await self._request("GET", "/user/favorites", authenticated=True)
        return [normalize_listing(fav.get("listing")) for fav in self._json(response) or [] if fav.get("listing")]


# Global client instance (singleton pattern)
_client: Optional[StorefrontApiClient] = None


def get_api_client(token_provider: Optional[TokenProvider] = None) -> StorefrontApiClient:
    """Get or create the shared API client."""
    global _client

    if _client is None:
        LoggingConfig.setup_logging()
        _client = StorefrontApiClient(token_provider=token_provider)
        logger.info("Storefront API client initialized", base_url=_client.base_url)

    return _client


async def close_api_client() -> None:
    """Close the shared API client."""
    global _client
    if _client:
        await _client.aclose()
        _client = None
        logger.info("Storefront API client closed")

"""End-to-end tests: browse listings, save a favorite, book a slot."""

import pytest
from unittest.mock import Mock
from storefront.models.filters import ListingFilters
from storefront.models.notice import NoticeKind
from storefront.services.api_client import StorefrontApiClient
from storefront.services.auth_gate import AuthSession
from storefront.services.favorites import FavoritesCoordinator
from storefront.services.listing_browser import ListingBrowser
from storefront.services.reservation_flow import ReservationFlow, ReservationStep
from tests.fixtures.raw_listings import raw_listing, raw_listing_page, raw_reservation, raw_slot
from tests.utils.helpers import RecordingBackend, request_json

CARD = dict(number="4242424242424242", expiry="12/29", cvc="123")


def storefront_backend():
    backend = RecordingBackend()
    riad = raw_listing(
        listing_id=42,
        name="Rick's Café",
        category="restaurant",
        base_price=300,
        slots=[
            raw_slot(2, "2024-01-15T20:00:00"),
            raw_slot(1, "2024-01-15T19:00:00"),
            raw_slot(3, "2024-01-16T19:00:00", available=False),
        ],
    )
    backend.route("GET", "/api/user/listings", body=raw_listing_page([riad, raw_listing(listing_id=7)], has_more=False))
    backend.route("GET", "/api/user/items/42", body=riad)
    backend.route("GET", "/api/user/favorites", body=[])
    backend.route("POST", "/api/user/favorites", status=201, body={})
    backend.route("POST", "/api/user/reservations", status=201, body=raw_reservation(
        reservation_id=900, listing_id=42, slot_id=1, when="2024-01-15T19:00:00Z", participants=2,
    ))
    return backend


@pytest.mark.integration
@pytest.mark.asyncio
async def test_browse_favorite_and_book():
    """Test the full path from the listing grid to a confirmed reservation."""
    backend = storefront_backend()
    redirects = Mock()
    session = AuthSession(on_redirect=redirects, current_path=lambda: "/explore")
    notices = []

    async with StorefrontApiClient(
        base_url="https://api.test.local/api",
        token_provider=session.token,
        transport=backend.transport(),
    ) as client:
        browser = ListingBrowser(client, notify=notices.append)
        await browser.apply_filters(ListingFilters(category="restaurant", min_price=0))
        assert [l.id for l in browser.listings] == ["42", "7"]
        params = backend.last("GET", "/api/user/listings").url.params
        assert params["category"] == "restaurant"
        assert params["minPrice"] == "0"

        favorites = FavoritesCoordinator(client, auth_gate=session, notify=notices.append)

        # Signed out: the gate redirects and nothing is sent
        await favorites.toggle("42")
        redirects.assert_called_once_with("/login?redirect=%2Fexplore&action=wishlist")
        assert not favorites.is_favorite("42")

        session.sign_in("guest-token")
        await favorites.initialize()
        await favorites.toggle("42")
        assert favorites.is_favorite("42")
        favorite_request = backend.last("POST", "/api/user/favorites")
        assert request_json(favorite_request) == {"listing_id": 42}
        assert favorite_request.headers["authorization"] == "Bearer guest-token"

        listing = await client.lookup_listing("42")
        assert [day.date for day in listing.availability] == ["2024-01-15"]
        assert [slot.time for slot in listing.availability[0].slots] == ["19:00", "20:00"]

        flow = ReservationFlow(client, notify=notices.append, payment_delay=0)
        flow.open(listing)
        flow.select_date("2024-01-15")
        assert flow.select_slot(1)
        flow.increment_participants()
        assert flow.proceed_to_payment()
        flow.update_card(**CARD)

        reservation = await flow.submit_payment()

    assert flow.step is ReservationStep.CONFIRMED
    assert reservation.id == "900"
    assert reservation.total_price == 600
    booking = request_json(backend.last("POST", "/api/user/reservations"))
    assert booking["listing_id"] == 42
    assert booking["slot_id"] == 1
    assert booking["date_time_reservation"] == "2024-01-15T19:00:00Z"
    assert booking["number_of_participants"] == 2
    assert booking["payment_token"].startswith("demo-")
    assert notices == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_backend_outage_surfaces_notices():
    """Test transport failures turn into notices instead of exceptions."""
    backend = RecordingBackend()
    backend.route("GET", "/api/user/listings", status=503, body={"detail": "unavailable"})
    backend.route("POST", "/api/user/favorites", status=503, body={"detail": "unavailable"})
    notices = []

    async with StorefrontApiClient(
        base_url="https://api.test.local/api",
        token_provider=lambda: "guest-token",
        transport=backend.transport(),
    ) as client:
        browser = ListingBrowser(client, notify=notices.append)
        assert await browser.refresh() is False

        favorites = FavoritesCoordinator(client, notify=notices.append)
        await favorites.toggle("42")

    assert browser.listings == []
    assert not favorites.is_favorite("42")
    assert [n.kind for n in notices] == [NoticeKind.LISTINGS_FAILED, NoticeKind.AUTH_REQUIRED]

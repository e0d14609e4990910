"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import AsyncMock

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STOREFRONT_API_URL", "https://api.test.local/api")
os.environ.setdefault("PAYMENT_SIMULATION_SECONDS", "0")
os.environ.setdefault("LOG_FORMAT", "text")

from tests.fixtures.raw_listings import raw_listing, raw_reservation, raw_slot  # noqa: E402


@pytest.fixture
def sample_raw_listing():
    """Raw backend listing with slots on two dates, one unavailable."""
    return raw_listing(
        listing_id=42,
        name="Rick's Café",
        category="restaurant",
        base_price=300,
        slots=[
            raw_slot(5, "2024-01-16T11:00:00", True),
            raw_slot(2, "2024-01-15T14:00:00", True),
            raw_slot(1, "2024-01-15T09:00:00", True),
            raw_slot(9, "2024-01-17T10:00:00", False),
        ],
    )


@pytest.fixture
def sample_listing(sample_raw_listing):
    """Normalized form of sample_raw_listing."""
    from storefront.services.listing_normalizer import normalize_listing

    return normalize_listing(sample_raw_listing)


@pytest.fixture
def sample_raw_reservation():
    return raw_reservation(
        reservation_id=701,
        listing_id=42,
        slot_id=1,
        when="2024-01-15T09:00:00Z",
        participants=2,
        total_price=600,
        status="confirmed",
    )


@pytest.fixture
def mock_reservation_service():
    """Reservation service returning a confirmed reservation."""
    from storefront.models.reservation import Reservation

    service = AsyncMock()
    service.create_reservation = AsyncMock(return_value=Reservation(
        id="701",
        listing_id="42",
        slot_id=1,
        date="2024-01-15",
        time="09:00",
        participants=2,
        status="confirmed",
        total_price=600,
        created_at="2024-01-10T12:00:00Z",
    ))
    return service


@pytest.fixture
def mock_favorites_service():
    """Favorites service with an empty remote set."""
    service = AsyncMock()
    service.list_favorites = AsyncMock(return_value=[])
    service.add_favorite = AsyncMock(return_value=None)
    service.remove_favorite = AsyncMock(return_value=None)
    service.favorite_listings = AsyncMock(return_value=[])
    return service


@pytest.fixture
def notices():
    """Collects notices passed to a notify callback."""
    return []

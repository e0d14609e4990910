"""Listing normalizer - map raw backend records to canonical listings and reservations.

Normalization is total: malformed or missing fields fall back to safe defaults
(0 for numbers, "" for strings, placeholders for media) instead of raising.
"""

import json
from typing import Any, Iterable, Optional

from storefront.models.listing import AvailabilityDay, Category, Host, Listing, Location, Slot
from storefront.models.reservation import Reservation
from storefront.utils.config import StorefrontConfig
from storefront.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Backend category labels seen in the wild -> canonical category
CATEGORY_LABELS = {
    "restaurant": Category.RESTAURANT,
    "restaurants": Category.RESTAURANT,
    "dining": Category.RESTAURANT,
    "event": Category.EVENT,
    "events": Category.EVENT,
    "cultural": Category.CULTURAL,
    "culture": Category.CULTURAL,
    "culturel": Category.CULTURAL,
    "cultural site": Category.CULTURAL,
    "cultural sites": Category.CULTURAL,
}

# Unknown or missing labels land in the broadest bucket
DEFAULT_CATEGORY = Category.CULTURAL

RESERVATION_STATUSES = ("confirmed", "pending", "cancelled")


def resolve_category(label: Any) -> Category:
    """Map a raw category label to the canonical enum."""
    if isinstance(label, Category):
        return label
    if not isinstance(label, str) or not label.strip():
        return DEFAULT_CATEGORY

    category = CATEGORY_LABELS.get(label.strip().lower())
    if category is None:
        logger.debug("Unknown category label, using default", label=label, default=DEFAULT_CATEGORY.value)
        return DEFAULT_CATEGORY
    return category


def safe_parse_json_list(value: Any) -> list[str]:
    """Parse a JSON-encoded array of strings, returning [] on any failure."""
    if isinstance(value, list):
        items = value
    elif not value or not isinstance(value, str):
        return []
    else:
        try:
            items = json.loads(value)
        except (ValueError, TypeError):
            return []
        if not isinstance(items, list):
            return []

    return [item for item in items if isinstance(item, str) and item]


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def group_slots(raw_slots: Optional[Iterable[dict]]) -> list[AvailabilityDay]:
    """
    Collapse flat availability records into a date-keyed slot calendar.

    Unavailable records are dropped. Dates keep the order in which their first
    available slot appears; slots within a date are sorted by HH:MM, which is
    chronological because the time string is zero-padded.
    """
    by_date: dict[str, list[Slot]] = {}

    for raw in raw_slots or []:
        if not isinstance(raw, dict) or not raw.get("is_available"):
            continue

        start = _as_str(raw.get("date_slot_start"))
        date, _, time_full = start.partition("T")
        if not date:
            continue

        slot = Slot(id=_as_int(raw.get("slot_id")), time=time_full[:5])
        by_date.setdefault(date, []).append(slot)

    return [
        AvailabilityDay(date=date, slots=sorted(slots, key=lambda s: s.time))
        for date, slots in by_date.items()
    ]


def normalize_listing(raw: dict) -> Listing:
    """Map a raw backend listing record to a canonical Listing."""
    raw = _as_dict(raw)
    address = _as_dict(raw.get("address"))
    partner = _as_dict(raw.get("partner"))
    category = _as_dict(raw.get("category"))

    images = safe_parse_json_list(raw.get("photos_json"))
    avatar = images[0] if images else StorefrontConfig.PLACEHOLDER_AVATAR
    if not images:
        images = [StorefrontConfig.PLACEHOLDER_IMAGE]

    name = _as_str(raw.get("name"))
    description = _as_str(raw.get("description"))
    street = _as_str(address.get("street_address"))

    return Listing(
        id=_as_str(raw.get("listing_id")),
        title=name,
        title_fr=name,
        description=description,
        description_fr=description,
        category=resolve_category(category.get("category_name")),
        price=max(0.0, _as_float(raw.get("base_price"))),
        rating=min(5.0, max(0.0, _as_float(raw.get("average_rating")))),
        review_count=max(0, _as_int(raw.get("reviews_count"))),
        images=images,
        location=Location(
            lat=_as_float(address.get("latitude")),
            lng=_as_float(address.get("longitude")),
            address=street,
            address_fr=street,
        ),
        availability=group_slots(raw.get("availability_slots")),
        amenities=safe_parse_json_list(_as_dict(raw.get("restaurant")).get("amenities_json")),
        host=Host(
            name=_as_str(partner.get("business_name")),
            avatar=avatar,
            verified=partner.get("verification_status") == "verified",
        ),
        created_at=_as_str(raw.get("creation_date")),
    )


def normalize_reservation(raw: dict) -> Reservation:
    """Map a raw backend reservation record to a Reservation."""
    raw = _as_dict(raw)
    stamp = _as_str(raw.get("date_time_reservation") or raw.get("booking_timestamp"))
    listing = _as_dict(raw.get("listing"))

    status = raw.get("status")
    if status not in RESERVATION_STATUSES:
        status = "pending"

    slot_id = raw.get("slot_id")

    return Reservation(
        id=_as_str(raw.get("reservation_id") or raw.get("id")),
        listing_id=_as_str(listing.get("listing_id") or raw.get("listing_id")),
        slot_id=_as_int(slot_id) if slot_id is not None else None,
        date=stamp[:10],
        time=stamp[11:16],
        participants=max(1, _as_int(raw.get("number_of_participants"), default=1)),
        status=status,
        total_price=max(0.0, _as_float(raw.get("total_price"))),
        created_at=_as_str(raw.get("booking_timestamp") or stamp),
    )

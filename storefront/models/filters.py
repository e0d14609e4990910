"""Filter criteria, query descriptor and result page models."""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from storefront.models.listing import Category, Listing


class GeoFilter(BaseModel):
    """Centre point and radius for a proximity search."""
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    radius: float = Field(..., ge=0, description="Radius in km, applied by the backend")


class ListingFilters(BaseModel):
    """User-selected criteria. A missing field means no constraint on that dimension."""
    model_config = ConfigDict(frozen=True)

    category: Optional[Category] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_rating: Optional[float] = None
    date: Optional[str] = Field(None, description="ISO date (YYYY-MM-DD)")
    location: Optional[GeoFilter] = None


# Model field -> backend query parameter
_WIRE_NAMES = {
    "page": "page",
    "per_page": "per_page",
    "category": "category",
    "min_price": "minPrice",
    "max_price": "maxPrice",
    "min_rating": "minRating",
    "date_from": "date_from",
    "lat": "lat",
    "lng": "lng",
    "radius": "radius",
    "search": "search",
}


class QueryDescriptor(BaseModel):
    """Query for the listing-query service."""
    model_config = ConfigDict(frozen=True)

    page: int = Field(1, ge=1)
    per_page: int = Field(..., ge=1)
    category: Optional[Category] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_rating: Optional[float] = None
    date_from: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius: Optional[float] = None
    search: Optional[str] = None

    @property
    def is_search(self) -> bool:
        return bool(self.search)

    def to_params(self) -> dict[str, Any]:
        """Backend query parameters, omitting absent and empty values."""
        params: dict[str, Any] = {}
        for field, wire_name in _WIRE_NAMES.items():
            value = getattr(self, field)
            if value is None or value == "":
                continue
            if isinstance(value, Category):
                value = value.value
            elif isinstance(value, float) and value.is_integer():
                # minPrice=0, not minPrice=0.0
                value = int(value)
            params[wire_name] = value
        return params


class ListingPage(BaseModel):
    """One page of listings as returned by the listing-query service."""
    listings: list[Listing] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 0
    has_more: bool = False

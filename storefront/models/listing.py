"""Listing models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Canonical listing categories."""
    RESTAURANT = "restaurant"
    EVENT = "event"
    CULTURAL = "cultural"


class Slot(BaseModel):
    """One bookable time on one date."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Backend slot ID")
    time: str = Field(..., description="Start time, zero-padded HH:MM")


class AvailabilityDay(BaseModel):
    """Available slots for a single date, sorted by time."""
    model_config = ConfigDict(frozen=True)

    date: str = Field(..., description="ISO date (YYYY-MM-DD)")
    slots: list[Slot] = Field(default_factory=list)


class Location(BaseModel):
    """Listing coordinates and bilingual address."""
    model_config = ConfigDict(frozen=True)

    lat: float = 0.0
    lng: float = 0.0
    address: str = ""
    address_fr: str = ""


class Host(BaseModel):
    """Partner hosting the listing."""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    avatar: str = Field(..., description="Avatar URL (placeholder when the partner has none)")
    verified: bool = False


class Listing(BaseModel):
    """Canonical bookable experience (restaurant, event or cultural site)."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Listing ID (text form of the backend numeric id)")
    title: str = ""
    title_fr: str = ""
    description: str = ""
    description_fr: str = ""
    category: Category = Field(..., description="Category: restaurant, event, cultural")
    price: float = Field(default=0, ge=0, description="Price per person")
    rating: float = Field(default=0, ge=0, le=5, description="Average rating (0-5)")
    review_count: int = Field(default=0, ge=0)
    images: list[str] = Field(..., min_length=1, description="Image URLs, never empty")
    location: Location = Field(default_factory=Location)
    availability: list[AvailabilityDay] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    host: Host
    created_at: str = ""

    def slots_for(self, date: str) -> list[Slot]:
        """Return the available slots on a date (empty if none)."""
        for day in self.availability:
            if day.date == date:
                return list(day.slots)
        return []

    def find_slot(self, slot_id: int, date: Optional[str] = None) -> Optional[tuple[str, Slot]]:
        """Locate a slot by id, optionally restricted to one date."""
        for day in self.availability:
            if date is not None and day.date != date:
                continue
            for slot in day.slots:
                if slot.id == slot_id:
                    return day.date, slot
        return None

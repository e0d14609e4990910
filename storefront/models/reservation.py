"""Reservation models - draft selection, card fields, request payload and committed outcome."""

import re
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


EXPIRY_PATTERN = re.compile(r"[0-9]{2}/[0-9]{2}")
CARD_NUMBER_PATTERN = re.compile(r"[0-9]{16}")


class ReservationDraft(BaseModel):
    """In-progress, unsaved booking selection."""
    date: Optional[str] = Field(None, description="Chosen date (YYYY-MM-DD)")
    slot_id: Optional[int] = Field(None, description="Chosen slot ID")
    time: str = Field("", description="Display time of the chosen slot (HH:MM)")
    participants: int = Field(default=1, ge=1, description="Participant count")
    special_requests: str = ""

    @property
    def is_complete(self) -> bool:
        """Both a date and a slot have been chosen."""
        return bool(self.date) and self.slot_id is not None


class CardDetails(BaseModel):
    """Card form fields. Only used for a superficial readiness check."""
    number: str = ""
    expiry: str = ""
    cvc: str = ""

    @property
    def is_ready(self) -> bool:
        digits = re.sub(r"\s+", "", self.number)
        return (
            bool(CARD_NUMBER_PATTERN.fullmatch(digits))
            and bool(EXPIRY_PATTERN.fullmatch(self.expiry))
            and len(self.cvc) >= 3
        )


class ReservationRequest(BaseModel):
    """Payload for the reservation-creation service."""
    listing_id: str
    slot_id: int
    date: str
    time: str
    participants: int = Field(..., ge=1)
    special_requests: str = ""
    payment_token: str


class Reservation(BaseModel):
    """Server-confirmed booking record."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Reservation ID")
    listing_id: str = Field(..., description="Listing ID")
    slot_id: Optional[int] = None
    date: str = ""
    time: str = ""
    participants: int = Field(default=1, ge=1)
    status: Literal["confirmed", "pending", "cancelled"] = "pending"
    total_price: float = Field(default=0, ge=0)
    created_at: str = ""

"""User-facing notices raised at action boundaries."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class NoticeKind(str, Enum):
    AUTH_REQUIRED = "auth_required"
    BOOKING_FAILED = "booking_failed"
    FAVORITES_FAILED = "favorites_failed"
    LISTINGS_FAILED = "listings_failed"


class Notice(BaseModel):
    """A visible, non-blocking message for the presentation layer."""
    kind: NoticeKind
    message: str = Field(..., description="Message shown to the user")
    detail: Optional[str] = Field(None, description="Underlying error, for diagnostics")

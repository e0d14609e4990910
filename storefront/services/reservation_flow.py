"""Reservation flow - drive one booking attempt from slot selection to a confirmed reservation."""

import asyncio
import time
from enum import Enum
from typing import Any, Callable, Optional

from storefront.models.listing import Listing
from storefront.models.notice import Notice, NoticeKind
from storefront.models.reservation import CardDetails, Reservation, ReservationDraft, ReservationRequest
from storefront.utils.config import StorefrontConfig
from storefront.utils.logging import (
    correlation_context,
    get_structured_logger,
    log_timing,
    mask_card_number,
    sanitize_error,
)

logger = get_structured_logger(__name__)

NoticeCallback = Callable[[Notice], None]


class ReservationStep(str, Enum):
    SELECTING = "selecting"
    PAYING = "paying"
    CONFIRMED = "confirmed"


def generate_payment_token() -> str:
    """Placeholder token sent in place of a real payment gateway token."""
    return f"{StorefrontConfig.PAYMENT_TOKEN_PREFIX}-{int(time.time() * 1000)}"


def coerce_participants(value: Any) -> int:
    """Participant count from user input, never below 1."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 1
    return max(1, count)


class ReservationFlow:
    """
    State machine for a single booking attempt: SELECTING -> PAYING -> CONFIRMED.

    Invalid transitions are refused (methods return False) rather than raised.
    ``open`` always starts a fresh draft; ``close`` discards it. There is no
    way back from PAYING to SELECTING other than reopening the flow.

    ``reservation_service`` must provide ``async create_reservation(request)``.
    """

    def __init__(
        self,
        reservation_service: Any,
        notify: Optional[NoticeCallback] = None,
        payment_delay: Optional[float] = None,
    ):
        self._service = reservation_service
        self._notify = notify
        self.payment_delay = (
            StorefrontConfig.PAYMENT_SIMULATION_SECONDS if payment_delay is None else payment_delay
        )

        self.listing: Optional[Listing] = None
        self.step = ReservationStep.SELECTING
        self.draft = ReservationDraft()
        self.card = CardDetails()
        self.reservation: Optional[Reservation] = None
        self.notice: Optional[Notice] = None
        self.is_submitting = False
        # Bumped on every open/close so a late response cannot touch a newer draft
        self._generation = 0

    @property
    def is_open(self) -> bool:
        return self.listing is not None

    def _reset(self) -> None:
        self._generation += 1
        self.step = ReservationStep.SELECTING
        self.draft = ReservationDraft()
        self.card = CardDetails()
        self.reservation = None
        self.notice = None
        self.is_submitting = False

    def open(self, listing: Listing) -> None:
        """Start a booking attempt for ``listing``."""
        self.listing = listing
        self._reset()
        logger.debug("Reservation flow opened", listing_id=listing.id)

    def close(self) -> None:
        """Discard the draft. An in-flight submission still runs to completion."""
        if self.is_submitting:
            logger.info(
                "Reservation flow closed with submission in flight",
                listing_id=self.listing.id if self.listing else None
            )
        self.listing = None
        self._reset()

    # Selecting
    def select_date(self, date: str) -> bool:
        """Choose a date; any previously chosen slot is cleared."""
        if self.step != ReservationStep.SELECTING or not self.is_open:
            return False
        self.draft.date = date or None
        self.draft.slot_id = None
        self.draft.time = ""
        return True

    def select_slot(self, slot_id: int) -> bool:
        """
        Choose a slot from the listing's availability.

        With a date chosen the slot must belong to it; without one the slot's
        own date is adopted.
        """
        if self.step != ReservationStep.SELECTING or not self.is_open:
            return False

        found = self.listing.find_slot(slot_id, self.draft.date or None)
        if found is None:
            logger.debug("Slot not available for selection", slot_id=slot_id, date=self.draft.date)
            return False

        date, slot = found
        self.draft.date = date
        self.draft.slot_id = slot.id
        self.draft.time = slot.time
        return True

    def set_participants(self, value: Any) -> int:
        self.draft.participants = coerce_participants(value)
        return self.draft.participants

    def increment_participants(self) -> int:
        return self.set_participants(self.draft.participants + 1)

    def decrement_participants(self) -> int:
        if self.draft.participants > 1:
            self.draft.participants -= 1
        return self.draft.participants

    def set_special_requests(self, text: str) -> None:
        self.draft.special_requests = text or ""

    @property
    def total_price(self) -> float:
        if self.listing is None:
            return 0.0
        return self.listing.price * self.draft.participants

    @property
    def can_proceed(self) -> bool:
        return self.step == ReservationStep.SELECTING and self.is_open and self.draft.is_complete

    def proceed_to_payment(self) -> bool:
        if not self.can_proceed:
            return False
        self.step = ReservationStep.PAYING
        logger.debug(
            "Reservation moved to payment",
            listing_id=self.listing.id,
            slot_id=self.draft.slot_id,
            date=self.draft.date
        )
        return True

    # Paying
    def update_card(
        self,
        number: Optional[str] = None,
        expiry: Optional[str] = None,
        cvc: Optional[str] = None,
    ) -> None:
        if number is not None:
            self.card.number = number
        if expiry is not None:
            self.card.expiry = expiry
        if cvc is not None:
            self.card.cvc = cvc

    @property
    def card_ready(self) -> bool:
        return self.card.is_ready

    @property
    def can_submit(self) -> bool:
        return self.step == ReservationStep.PAYING and self.card_ready and not self.is_submitting

    def _raise_notice(self, notice: Notice) -> None:
        self.notice = notice
        if self._notify is not None:
            self._notify(notice)

    async def submit_payment(self) -> Optional[Reservation]:
        """
        Simulate payment, then commit the reservation.

        Returns the confirmed Reservation, or None when submission is not
        allowed or the commit failed. On failure the flow stays in PAYING with
        a booking_failed notice so the user can retry.
        """
        if not self.can_submit:
            return None

        generation = self._generation
        listing = self.listing
        draft = self.draft.model_copy()
        self.is_submitting = True
        self.notice = None

        with correlation_context():
            logger.info(
                "Reservation payment submitted",
                listing_id=listing.id,
                slot_id=draft.slot_id,
                participants=draft.participants,
                card=mask_card_number(self.card.number)
            )

            try:
                await asyncio.sleep(self.payment_delay)

                request = ReservationRequest(
                    listing_id=listing.id,
                    slot_id=draft.slot_id,
                    date=draft.date,
                    time=draft.time,
                    participants=draft.participants,
                    special_requests=draft.special_requests,
                    payment_token=generate_payment_token(),
                )
                with log_timing("create_reservation", logger=logger, listing_id=listing.id):
                    created = await self._service.create_reservation(request)
            except Exception as e:
                logger.error(
                    "Reservation commit failed",
                    listing_id=listing.id,
                    slot_id=draft.slot_id,
                    error=sanitize_error(e),
                    exc_info=True
                )
                if generation == self._generation:
                    self._raise_notice(Notice(
                        kind=NoticeKind.BOOKING_FAILED,
                        message="Payment failed. Please try again.",
                        detail=sanitize_error(e),
                    ))
                return None
            finally:
                if generation == self._generation:
                    self.is_submitting = False

            outcome = self._complete_outcome(created, listing, draft)

            if generation != self._generation:
                logger.warning(
                    "Reservation confirmed after the flow was closed",
                    reservation_id=outcome.id,
                    listing_id=listing.id
                )
                return outcome

            self.reservation = outcome
            self.step = ReservationStep.CONFIRMED
            logger.info(
                "Reservation confirmed",
                reservation_id=outcome.id,
                listing_id=listing.id,
                total_price=outcome.total_price
            )
            return outcome

    @staticmethod
    def _complete_outcome(created: Reservation, listing: Listing, draft: ReservationDraft) -> Reservation:
        """Fill fields the backend omitted; total price is always price x participants."""
        total_price = listing.price * draft.participants
        if created.total_price and created.total_price != total_price:
            logger.warning(
                "Backend total differs from price x participants",
                reservation_id=created.id,
                backend_total=created.total_price,
                total_price=total_price
            )

        updates: dict[str, Any] = {"total_price": total_price}
        if not created.listing_id:
            updates["listing_id"] = listing.id
        if created.slot_id is None:
            updates["slot_id"] = draft.slot_id
        if not created.date:
            updates["date"] = draft.date
        if not created.time:
            updates["time"] = draft.time
        return created.model_copy(update=updates)

"""Booking lifecycle operations available to guests."""

import logging
from typing import TYPE_CHECKING

from staysearch.models import Booking, BookingError, BookingStatus, ErrorCode
from staysearch.utils.logging import log_search_operation

if TYPE_CHECKING:
    from .hotel_store import HotelStore

logger = logging.getLogger(__name__)

# Conditional writes that lose a race are re-read this many times
MAX_CANCEL_ATTEMPTS = 3


class BookingService:
    """Service for guest-facing booking changes."""

    def __init__(self, store: "HotelStore") -> None:
        """Initialize booking service.

        Args:
            store: Data access for bookings
        """
        self.store = store

    def get_booking(self, booking_id: str, user_id: str) -> Booking:
        """Get a booking owned by the given user.

        Raises:
            BookingError: BOOKING_NOT_FOUND or UNAUTHORIZED
        """
        booking = self.store.get_booking(booking_id)
        if booking is None:
            raise BookingError(
                ErrorCode.BOOKING_NOT_FOUND, details={"booking_id": booking_id}
            )
        if booking.user_id != user_id:
            raise BookingError(ErrorCode.UNAUTHORIZED, details={"booking_id": booking_id})
        return booking

    def list_bookings(self, user_id: str) -> list[Booking]:
        """List a user's bookings of every status, latest check-in first."""
        bookings = self.store.list_bookings_for_user(user_id)
        log_search_operation(logger, "list_bookings", user_id=user_id, count=len(bookings))
        return bookings

    def cancel_booking(self, booking_id: str, user_id: str) -> Booking:
        """Cancel a booking on behalf of its owner.

        Cancelling an already cancelled booking succeeds without a write.
        Because only confirmed bookings hold inventory, the unit becomes
        searchable again as soon as the status changes.

        Args:
            booking_id: Booking to cancel
            user_id: Requesting user; must own the booking

        Returns:
            The booking with CANCELLED status

        Raises:
            BookingError: BOOKING_NOT_FOUND or UNAUTHORIZED
        """
        for _ in range(MAX_CANCEL_ATTEMPTS):
            booking = self.get_booking(booking_id, user_id)

            if booking.status == BookingStatus.CANCELLED:
                log_search_operation(
                    logger, "cancel_booking", booking_id=booking_id, result="already_cancelled"
                )
                return booking

            if self.store.update_booking_status(
                booking_id,
                BookingStatus.CANCELLED,
                expected_status=booking.status,
            ):
                log_search_operation(
                    logger,
                    "cancel_booking",
                    booking_id=booking_id,
                    hotel_id=booking.hotel_id,
                    previous_status=booking.status.value,
                    result="cancelled",
                )
                return booking.model_copy(update={"status": BookingStatus.CANCELLED})

            logger.warning("Booking %s changed during cancellation, retrying", booking_id)

        log_search_operation(
            logger,
            "cancel_booking",
            booking_id=booking_id,
            error="status kept changing during cancellation",
        )
        raise BookingError(ErrorCode.BOOKING_CONFLICT, details={"booking_id": booking_id})

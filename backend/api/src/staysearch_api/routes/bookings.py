"""Booking endpoints for guests: listing, lookup and cancellation."""

from fastapi import APIRouter, Depends, Query

from staysearch.models import BookingStatus
from staysearch.services.booking import BookingService
from staysearch_api.dependencies import get_booking_service
from staysearch_api.models.bookings import (
    BookingDetailsResponse,
    BookingListResponse,
    CancelBookingRequest,
    CancelBookingResponse,
)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get(
    "",
    summary="List my bookings",
    description="""
List the bookings a user made, latest check-in first. The `booking_id` of
each entry is what cancellation takes.

**Notes:**
- Every status is listed unless `status` is given
- `total_count` counts matches before `limit` is applied
""",
    response_model=BookingListResponse,
    responses={
        503: {"description": "Booking data store unreachable or not configured"},
    },
)
def list_bookings(
    user_id: str = Query(..., min_length=1, description="User whose bookings to list"),
    status: BookingStatus | None = Query(
        default=None,
        description="Filter by booking status",
    ),
    limit: int = Query(
        default=20,
        ge=1,
        le=100,
        description="Maximum results to return",
    ),
    service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """List the bookings of one user.

    Optionally filter by status.
    """
    bookings = service.list_bookings(user_id)
    if status:
        bookings = [b for b in bookings if b.status == status]

    return BookingListResponse(bookings=bookings[:limit], total_count=len(bookings))


@router.get(
    "/{booking_id}",
    summary="Get a booking",
    response_model=BookingDetailsResponse,
    responses={
        403: {"description": "Booking belongs to another user"},
        404: {"description": "Booking not found"},
        503: {"description": "Booking data store unreachable or not configured"},
    },
)
def get_booking(
    booking_id: str,
    user_id: str = Query(..., min_length=1, description="User who owns the booking"),
    service: BookingService = Depends(get_booking_service),
) -> BookingDetailsResponse:
    """Get one booking owned by the requesting user."""
    return BookingDetailsResponse(booking=service.get_booking(booking_id, user_id))


@router.post(
    "/{booking_id}/cancel",
    summary="Cancel a booking",
    description="""
Cancel a booking on behalf of the user who made it.

**Notes:**
- Cancelling an already cancelled booking succeeds again (idempotent)
- A cancelled booking no longer counts against room inventory
""",
    response_model=CancelBookingResponse,
    responses={
        403: {"description": "Booking belongs to another user"},
        404: {"description": "Booking not found"},
        409: {"description": "Booking changed concurrently; retry"},
        503: {"description": "Booking data store unreachable or not configured"},
    },
)
def cancel_booking(
    booking_id: str,
    body: CancelBookingRequest,
    service: BookingService = Depends(get_booking_service),
) -> CancelBookingResponse:
    """Cancel a booking owned by the requesting user."""
    booking = service.cancel_booking(booking_id, body.user_id)
    return CancelBookingResponse(booking_id=booking.booking_id, status=booking.status)

"""API models for booking endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from staysearch.models import Booking, BookingStatus


class CancelBookingRequest(BaseModel):
    """Request body for cancelling a booking."""

    model_config = ConfigDict(strict=True)

    user_id: str = Field(
        ...,
        min_length=1,
        description="User requesting the cancellation; must own the booking",
        examples=["user-123"],
    )


class CancelBookingResponse(BaseModel):
    """Response model for booking cancellation."""

    model_config = ConfigDict(strict=True)

    booking_id: str
    status: BookingStatus
    success: bool = True
    message: str = "Booking successfully cancelled."


class BookingListResponse(BaseModel):
    """A user's bookings, latest check-in first."""

    model_config = ConfigDict(strict=True)

    bookings: list[Booking]
    total_count: int = Field(..., ge=0)


class BookingDetailsResponse(BaseModel):
    """Response model for a single booking."""

    model_config = ConfigDict(strict=True)

    booking: Booking

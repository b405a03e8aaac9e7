"""Booking model."""

import datetime as dt
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import BookingStatus


class Booking(BaseModel):
    """A booking of one unit of a room type.

    The stay occupies the half-open interval [check_in, check_out).
    """

    model_config = ConfigDict(strict=True)

    booking_id: str
    hotel_id: str
    room_id: str
    user_id: str = ""
    check_in: dt.datetime
    check_out: dt.datetime
    status: BookingStatus = BookingStatus.PENDING
    guests: int = Field(default=1, ge=1)
    total_price: int = Field(default=0, ge=0)
    customer_name: str | None = None
    customer_email: str | None = None

    @model_validator(mode="after")
    def validate_stay(self) -> Self:
        """Check-out must come after check-in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self

    def overlaps(self, start: dt.datetime, end: dt.datetime) -> bool:
        """Whether this stay overlaps the half-open window [start, end)."""
        return self.check_in < end and start < self.check_out

    @property
    def consumes_inventory(self) -> bool:
        """Only confirmed bookings hold a unit."""
        return self.status == BookingStatus.CONFIRMED

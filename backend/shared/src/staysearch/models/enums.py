"""Enumeration types for StaySearch data models."""

from enum import Enum


class BookingStatus(str, Enum):
    """Status of a booking.

    Only CONFIRMED bookings consume room inventory.
    """

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class RoomType(str, Enum):
    """Category of bookable unit within a hotel."""

    STANDARD = "Standard"
    DELUXE = "Deluxe"
    SUITE = "Suite"

"""Pydantic models for StaySearch data entities."""

from .booking import Booking
from .enums import BookingStatus, RoomType
from .errors import BookingError, ErrorCode, ToolError
from .hotel import Hotel, Room
from .search import ALL_CITIES, RoomAvailability, SearchCriteria, parse_guest_count

__all__ = [
    # Enums
    "BookingStatus",
    "RoomType",
    # Errors
    "BookingError",
    "ErrorCode",
    "ToolError",
    # Hotel
    "Hotel",
    "Room",
    # Booking
    "Booking",
    # Search
    "ALL_CITIES",
    "RoomAvailability",
    "SearchCriteria",
    "parse_guest_count",
]

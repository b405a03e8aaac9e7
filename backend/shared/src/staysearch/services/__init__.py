"""Backend services for StaySearch."""

from .availability import AvailabilityResolver, count_occupancy, room_status
from .booking import BookingService
from .hotel_store import (
    DynamoDBHotelStore,
    HotelStore,
    get_hotel_store,
    reset_hotel_store,
)

__all__ = [
    "AvailabilityResolver",
    "BookingService",
    "DynamoDBHotelStore",
    "HotelStore",
    "count_occupancy",
    "get_hotel_store",
    "reset_hotel_store",
    "room_status",
]

"""API-specific request/response models.

Domain models (Hotel, Room, Booking, ...) live in staysearch.models and
are reused here.

Modules:
- hotels: Search, hotel details and room availability responses
- bookings: Booking listing, details and cancellation
"""

__all__: list[str] = []

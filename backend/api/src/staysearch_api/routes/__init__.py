"""API routes package.

Routers are organized by domain:

- health: Health check endpoints
- hotels: Hotel search, details and room availability
- bookings: Booking cancellation

All routers are registered in main.py with /api prefix.
"""

from staysearch_api.routes.bookings import router as bookings_router
from staysearch_api.routes.health import router as health_router
from staysearch_api.routes.hotels import router as hotels_router

__all__ = [
    "bookings_router",
    "health_router",
    "hotels_router",
]

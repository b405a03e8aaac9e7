"""FastAPI dependency injection providers for shared services.

Services are lazily instantiated and cached with @lru_cache so every
request reuses one store connection.

Usage in routes:
    from staysearch_api.dependencies import get_availability_resolver

    @router.get("/hotels/search")
    def search_hotels(
        resolver: AvailabilityResolver = Depends(get_availability_resolver),
    ):
        ...

Service Dependency Graph:
    Settings (get_settings)
        └── DynamoDBHotelStore (singleton via get_hotel_store)
                ├── AvailabilityResolver
                └── BookingService

Testing:
    Use app.dependency_overrides or reset_services() between tests.
"""

from functools import lru_cache

from staysearch.config import get_settings
from staysearch.services.availability import AvailabilityResolver
from staysearch.services.booking import BookingService
from staysearch.services.hotel_store import HotelStore, get_hotel_store


def get_store() -> HotelStore:
    """Get the shared hotel store.

    Raises:
        BookingError: SEARCH_UNAVAILABLE when the store is not configured
    """
    return get_hotel_store()


@lru_cache
def get_availability_resolver() -> AvailabilityResolver:
    """Get cached AvailabilityResolver instance."""
    return AvailabilityResolver(store=get_hotel_store(), settings=get_settings())


@lru_cache
def get_booking_service() -> BookingService:
    """Get cached BookingService instance."""
    return BookingService(store=get_hotel_store())


def reset_services() -> None:
    """Clear all cached service instances.

    Call this in test fixtures to ensure clean state between tests.
    Also resets the underlying store singleton and settings.
    """
    from staysearch.config import reset_settings
    from staysearch.services.hotel_store import reset_hotel_store

    get_availability_resolver.cache_clear()
    get_booking_service.cache_clear()

    reset_hotel_store()
    reset_settings()

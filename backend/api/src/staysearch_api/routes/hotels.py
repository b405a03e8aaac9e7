"""Hotel endpoints for search, details and room availability.

Dates are ISO 8601 (YYYY-MM-DD) and interpreted as midnight UTC. A stay
occupies [check_in, check_out). Prices are in paise.
"""

from fastapi import APIRouter, Depends, Query

from staysearch.models import BookingError, ErrorCode, SearchCriteria
from staysearch.services.availability import AvailabilityResolver
from staysearch.services.hotel_store import HotelStore
from staysearch_api.dependencies import get_availability_resolver, get_store
from staysearch_api.models.hotels import (
    HotelDetailsResponse,
    HotelSearchResponse,
    RoomAvailabilityResponse,
    SearchCriteriaEcho,
)

router = APIRouter(tags=["hotels"])


@router.get(
    "/hotels/search",
    summary="Search hotels",
    description="""
Find hotels in a city that can host a stay.

**Notes:**
- `city` omitted or `All` searches every city
- Room inventory is only checked when both `check_in` and `check_out` are
  given; with one or none, every hotel in the city is returned
- `guests` defaults to 1 when absent or not a number
- A 503 response means the search backend is unavailable, which is
  different from an empty result
""",
    response_description="Hotels with at least one suitable free room type",
    response_model=HotelSearchResponse,
    responses={
        400: {"description": "Unparsable dates or check_out not after check_in"},
        503: {"description": "Hotel data store unreachable or not configured"},
    },
)
def search_hotels(
    city: str | None = Query(None, description="City name or 'All'", examples=["Goa"]),
    check_in: str | None = Query(
        None, description="Check-in date (YYYY-MM-DD)", examples=["2025-01-12"]
    ),
    check_out: str | None = Query(
        None, description="Check-out date (YYYY-MM-DD)", examples=["2025-01-15"]
    ),
    guests: str | None = Query(None, description="Number of guests", examples=["2"]),
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
) -> HotelSearchResponse:
    """Search hotels by city, dates and guest count."""
    criteria = SearchCriteria.from_params(
        city=city, check_in=check_in, check_out=check_out, guests=guests
    )
    hotels = resolver.resolve(criteria)

    return HotelSearchResponse(
        hotels=hotels,
        total_count=len(hotels),
        date_filtered=criteria.has_date_range,
        criteria=SearchCriteriaEcho.from_criteria(criteria),
    )


@router.get(
    "/hotels/{hotel_id}",
    summary="Get hotel details",
    description="Get a hotel with all of its room types.",
    response_model=HotelDetailsResponse,
    responses={
        404: {"description": "Hotel not found"},
        503: {"description": "Hotel data store unreachable or not configured"},
    },
)
def get_hotel(
    hotel_id: str,
    store: HotelStore = Depends(get_store),
) -> HotelDetailsResponse:
    """Get hotel details including room types."""
    hotel = store.get_hotel(hotel_id)
    if hotel is None:
        raise BookingError(ErrorCode.HOTEL_NOT_FOUND, details={"hotel_id": hotel_id})
    return HotelDetailsResponse(hotel=hotel)


@router.get(
    "/hotels/{hotel_id}/availability",
    summary="Get room availability",
    description="""
Get the free units of each room type of a hotel for a stay.

Without both dates no bookings are consulted and every unit is reported
free.
""",
    response_model=RoomAvailabilityResponse,
    responses={
        400: {"description": "Unparsable dates or check_out not after check_in"},
        404: {"description": "Hotel not found"},
        503: {"description": "Hotel data store unreachable or not configured"},
    },
)
def get_room_availability(
    hotel_id: str,
    check_in: str | None = Query(None, description="Check-in date (YYYY-MM-DD)"),
    check_out: str | None = Query(None, description="Check-out date (YYYY-MM-DD)"),
    guests: str | None = Query(None, description="Number of guests"),
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
) -> RoomAvailabilityResponse:
    """Get per-room-type availability for one hotel."""
    criteria = SearchCriteria.from_params(
        check_in=check_in, check_out=check_out, guests=guests
    )
    rooms = resolver.room_availability(hotel_id, criteria)

    return RoomAvailabilityResponse(
        hotel_id=hotel_id,
        rooms=rooms,
        is_available=any(room.is_available for room in rooms),
        criteria=SearchCriteriaEcho.from_criteria(criteria),
    )

"""API models for hotel search and availability endpoints."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from staysearch.models import Hotel, RoomAvailability, SearchCriteria


class SearchCriteriaEcho(BaseModel):
    """Normalized criteria the search actually ran with."""

    model_config = ConfigDict(strict=True)

    city: str | None = Field(
        default=None,
        description="City filter; null means all cities",
        examples=["Goa"],
    )
    check_in: dt.date | None = Field(
        default=None,
        description="Check-in date used for the inventory check",
        examples=["2025-01-12"],
    )
    check_out: dt.date | None = Field(
        default=None,
        description="Check-out date used for the inventory check",
        examples=["2025-01-15"],
    )
    guests: int = Field(..., ge=1, description="Guest count", examples=[2])

    @classmethod
    def from_criteria(cls, criteria: SearchCriteria) -> "SearchCriteriaEcho":
        return cls(
            city=criteria.city_filter,
            check_in=criteria.check_in.date() if criteria.check_in else None,
            check_out=criteria.check_out.date() if criteria.check_out else None,
            guests=criteria.guests,
        )


class HotelSearchResponse(BaseModel):
    """Hotel search results.

    An empty ``hotels`` list always means "no matches"; a failing data
    store is reported as a 503 error instead.
    """

    model_config = ConfigDict(
        strict=True,
        json_schema_extra={
            "examples": [
                {
                    "hotels": [
                        {
                            "hotel_id": "sea-breeze-goa",
                            "slug": "sea-breeze-goa",
                            "name": "Sea Breeze",
                            "city": "Goa",
                            "description": "Beachfront rooms",
                            "address": None,
                            "images": [],
                            "amenities": ["wifi", "pool"],
                            "rating": 4.5,
                            "rooms": [],
                        }
                    ],
                    "total_count": 1,
                    "date_filtered": True,
                    "criteria": {
                        "city": "Goa",
                        "check_in": "2025-01-12",
                        "check_out": "2025-01-15",
                        "guests": 2,
                    },
                    "status": "success",
                }
            ]
        },
    )

    hotels: list[Hotel]
    total_count: int = Field(..., ge=0)
    date_filtered: bool = Field(
        ...,
        description="Whether room inventory was checked (both dates given)",
    )
    criteria: SearchCriteriaEcho
    status: str = "success"


class HotelDetailsResponse(BaseModel):
    """Response model for hotel details."""

    model_config = ConfigDict(strict=True)

    hotel: Hotel
    status: str = "success"


class RoomAvailabilityResponse(BaseModel):
    """Per-room-type availability for one hotel."""

    model_config = ConfigDict(strict=True)

    hotel_id: str
    rooms: list[RoomAvailability]
    is_available: bool = Field(
        ...,
        description="True when at least one room type can host the stay",
    )
    criteria: SearchCriteriaEcho
    status: str = "success"

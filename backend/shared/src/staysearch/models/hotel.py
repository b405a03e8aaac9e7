"""Hotel and room type models.

These mirror the records kept in the hotels and rooms tables. Both are
read-only to the search service.
"""

from pydantic import BaseModel, ConfigDict, Field

from .enums import RoomType


class Room(BaseModel):
    """A room type offered by one hotel."""

    model_config = ConfigDict(strict=True)

    room_id: str
    hotel_id: str
    room_type: RoomType = RoomType.STANDARD
    capacity: int = Field(ge=1, description="Maximum guests per unit")
    total_rooms: int = Field(ge=0, description="Total interchangeable units of this type")
    price: int = Field(ge=0, description="Nightly price in minor currency units (paise)")


class Hotel(BaseModel):
    """Hotel listing."""

    model_config = ConfigDict(strict=True)

    hotel_id: str
    slug: str = ""
    name: str
    city: str
    description: str = ""
    address: str | None = None
    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    rating: float = Field(default=0.0, ge=0, le=5)
    rooms: list[Room] = Field(default_factory=list)

"""Search criteria and availability result models."""

import datetime as dt
import re
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staysearch.utils.timestamps import normalize_timestamp

from .errors import BookingError, ErrorCode
from .hotel import Room

ALL_CITIES = "All"

# Leading integer, so "3 guests" and "2.5" read as 3 and 2
_GUEST_COUNT = re.compile(r"\s*([+-]?\d+)")


class SearchCriteria(BaseModel):
    """Ephemeral hotel search request.

    Date filtering is all or nothing: it is active only when both
    check_in and check_out are present.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    city: str | None = None
    check_in: dt.datetime | None = None
    check_out: dt.datetime | None = None
    guests: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def validate_range(self) -> Self:
        """Reject a reversed or empty stay."""
        if self.has_date_range and self.check_out <= self.check_in:  # type: ignore[operator]
            raise BookingError(
                ErrorCode.INVALID_DATE_RANGE,
                details={
                    "check_in": self.check_in.isoformat(),  # type: ignore[union-attr]
                    "check_out": self.check_out.isoformat(),  # type: ignore[union-attr]
                },
            )
        return self

    @property
    def has_date_range(self) -> bool:
        return self.check_in is not None and self.check_out is not None

    @property
    def city_filter(self) -> str | None:
        """City to filter on, or None when every city matches."""
        if not self.city or self.city == ALL_CITIES:
            return None
        return self.city

    @classmethod
    def from_params(
        cls,
        city: str | None = None,
        check_in: str | dt.date | None = None,
        check_out: str | dt.date | None = None,
        guests: str | int | None = None,
    ) -> "SearchCriteria":
        """Build criteria from raw request parameters.

        Args:
            city: City name; blank or "All" disables the filter
            check_in: ISO date or datetime
            check_out: ISO date or datetime
            guests: Guest count; absent, unparsable or < 1 becomes 1

        Returns:
            Normalized SearchCriteria

        Raises:
            BookingError: INVALID_DATE_RANGE for unparsable dates or a
                check_out that is not after check_in
        """
        start = _parse_search_date(check_in, "check_in")
        end = _parse_search_date(check_out, "check_out")
        if start is None or end is None:
            # Partial date input means no date filtering
            start = end = None

        return cls(
            city=city.strip() if city and city.strip() else None,
            check_in=start,
            check_out=end,
            guests=parse_guest_count(guests),
        )


def parse_guest_count(raw: str | int | None) -> int:
    """Parse a guest count, defaulting to 1."""
    if raw is None or isinstance(raw, bool):
        return 1
    match = _GUEST_COUNT.match(str(raw))
    if match is None:
        return 1
    value = int(match.group(1))
    return value if value >= 1 else 1


def _parse_search_date(raw: str | dt.date | None, field: str) -> dt.datetime | None:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    parsed = normalize_timestamp(raw)
    if parsed is None:
        raise BookingError(ErrorCode.INVALID_DATE_RANGE, details={field: str(raw)})
    return parsed


class RoomAvailability(BaseModel):
    """Inventory status of one room type for a requested stay."""

    model_config = ConfigDict(strict=True)

    room: Room
    booked_rooms: int = Field(ge=0, description="Overlapping confirmed bookings")
    available_rooms: int = Field(ge=0, description="Units still free for the whole stay")
    fits_guests: bool
    is_available: bool

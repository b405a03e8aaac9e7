"""Availability resolution for hotel search.

A hotel is available for a stay when at least one of its room types fits
the party and has fewer overlapping confirmed bookings than units.
"""

import contextvars
import datetime as dt
import time
from collections import Counter
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Any, TypeVar

from staysearch.config import Settings, get_settings
from staysearch.models import (
    Booking,
    BookingError,
    ErrorCode,
    Hotel,
    Room,
    RoomAvailability,
    SearchCriteria,
)
from staysearch.utils.logging import get_logger, log_search_operation

if TYPE_CHECKING:
    from .hotel_store import HotelStore

logger = get_logger(__name__)

T = TypeVar("T")

Occupancy = Counter[tuple[str, str]]


def count_occupancy(
    bookings: Iterable[Booking],
    check_in: dt.datetime,
    check_out: dt.datetime,
) -> Occupancy:
    """Count confirmed bookings overlapping [check_in, check_out).

    Args:
        bookings: Candidate bookings; non-confirmed ones are ignored
        check_in: Requested check-in
        check_out: Requested check-out

    Returns:
        Counter keyed by (hotel_id, room_id)
    """
    return Counter(
        (b.hotel_id, b.room_id)
        for b in bookings
        if b.consumes_inventory and b.overlaps(check_in, check_out)
    )


def room_status(room: Room, booked_rooms: int, guests: int) -> RoomAvailability:
    """Availability of one room type given its overlapping bookings."""
    fits_guests = room.capacity >= guests
    return RoomAvailability(
        room=room,
        booked_rooms=booked_rooms,
        available_rooms=max(room.total_rooms - booked_rooms, 0),
        fits_guests=fits_guests,
        is_available=fits_guests and booked_rooms < room.total_rooms,
    )


class AvailabilityResolver:
    """Resolves which hotels can host a stay."""

    def __init__(
        self,
        store: "HotelStore",
        settings: Settings | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            store: Data access for hotels, rooms and bookings
            settings: Runtime settings. Defaults to get_settings().
        """
        self.store = store
        self.settings = settings or get_settings()

    def resolve(self, criteria: SearchCriteria) -> list[Hotel]:
        """Find hotels matching the criteria.

        Without a date range every hotel in the city is returned and no
        inventory check is made. With one, a hotel is kept only if some
        room type fits the guests and still has a free unit for the
        whole stay. Store order is preserved.

        Args:
            criteria: Search criteria

        Returns:
            Matching hotels

        Raises:
            BookingError: SEARCH_UNAVAILABLE if the store fails or the
                fetch deadline passes
        """
        started = time.perf_counter()
        city = criteria.city_filter

        hotels = self.store.list_hotels_by_city(city)
        if not hotels:
            log_search_operation(logger, "resolve", city=city, candidates=0, available=0)
            return []

        if not criteria.has_date_range:
            log_search_operation(
                logger,
                "resolve",
                city=city,
                candidates=len(hotels),
                available=len(hotels),
                date_filtered=False,
            )
            return hotels

        check_in: dt.datetime = criteria.check_in  # type: ignore[assignment]
        check_out: dt.datetime = criteria.check_out  # type: ignore[assignment]
        occupancy, rooms_by_hotel = self._fetch_inventory(hotels, check_in, check_out)

        available = [
            hotel
            for hotel in hotels
            if any(
                room_status(
                    room, occupancy[(hotel.hotel_id, room.room_id)], criteria.guests
                ).is_available
                for room in rooms_by_hotel.get(hotel.hotel_id, [])
            )
        ]

        log_search_operation(
            logger,
            "resolve",
            city=city,
            check_in=check_in.date().isoformat(),
            check_out=check_out.date().isoformat(),
            guests=criteria.guests,
            candidates=len(hotels),
            available=len(available),
            elapsed_ms=round((time.perf_counter() - started) * 1000),
        )
        return available

    def room_availability(
        self,
        hotel_id: str,
        criteria: SearchCriteria,
    ) -> list[RoomAvailability]:
        """Per-room-type availability for one hotel.

        Without a date range no bookings are consulted and every unit is
        reported free.

        Args:
            hotel_id: Hotel to inspect
            criteria: Dates and guest count (city is ignored)

        Returns:
            One RoomAvailability per room type, in store order

        Raises:
            BookingError: HOTEL_NOT_FOUND if the hotel does not exist
        """
        hotel = self.store.get_hotel(hotel_id)
        if hotel is None:
            raise BookingError(ErrorCode.HOTEL_NOT_FOUND, details={"hotel_id": hotel_id})

        occupancy: Occupancy = Counter()
        if criteria.has_date_range:
            check_in: dt.datetime = criteria.check_in  # type: ignore[assignment]
            check_out: dt.datetime = criteria.check_out  # type: ignore[assignment]
            bookings = self.store.list_confirmed_bookings([hotel_id], check_in)
            occupancy = count_occupancy(bookings, check_in, check_out)

        return [
            room_status(room, occupancy[(hotel_id, room.room_id)], criteria.guests)
            for room in hotel.rooms
        ]

    def _fetch_inventory(
        self,
        hotels: list[Hotel],
        check_in: dt.datetime,
        check_out: dt.datetime,
    ) -> tuple[Occupancy, dict[str, list[Room]]]:
        """Fetch bookings and room types concurrently under one deadline."""
        hotel_ids = [hotel.hotel_id for hotel in hotels]
        workers = min(self.settings.search_max_workers, len(hotel_ids) + 1)
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="search")
        deadline = time.monotonic() + self.settings.search_timeout_seconds
        timed_out = False
        futures: list[Future[Any]] = []
        try:
            bookings_future = _submit(
                executor, self.store.list_confirmed_bookings, hotel_ids, check_in
            )
            room_futures = {
                hotel_id: _submit(executor, self.store.list_rooms_for_hotel, hotel_id)
                for hotel_id in hotel_ids
            }

            futures = [bookings_future, *room_futures.values()]
            done, not_done = wait(
                futures,
                timeout=self.settings.search_timeout_seconds,
                return_when=FIRST_EXCEPTION,
            )

            # Surface the first store failure before any timeout
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()  # type: ignore[misc]

            if not_done:
                timed_out = True
                logger.error(
                    "Inventory fetch exceeded %.1fs deadline (%d of %d pending)",
                    self.settings.search_timeout_seconds,
                    len(not_done),
                    len(futures),
                )
                raise BookingError(
                    ErrorCode.SEARCH_UNAVAILABLE,
                    details={"reason": "timeout"},
                )

            occupancy = count_occupancy(bookings_future.result(), check_in, check_out)
            rooms_by_hotel = {
                hotel_id: future.result() for hotel_id, future in room_futures.items()
            }
            return occupancy, rooms_by_hotel
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
            if not timed_out:
                # Let fetches already running finish, still within the deadline
                wait(futures, timeout=max(deadline - time.monotonic(), 0))


def _submit(
    executor: ThreadPoolExecutor,
    fn: Callable[..., T],
    *args: Any,
) -> "Future[T]":
    """Submit work carrying the caller's context (correlation ID)."""
    context = contextvars.copy_context()
    return executor.submit(context.run, fn, *args)

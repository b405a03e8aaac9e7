"""Unit tests for AvailabilityResolver.

The store is a MagicMock, so these tests cover the in-process half of
the overlap test, inventory counting and fetch orchestration.
"""

import datetime as dt
import threading
import time
from typing import Any
from unittest.mock import MagicMock

import pytest

from staysearch.config import Settings
from staysearch.models import (
    Booking,
    BookingError,
    BookingStatus,
    ErrorCode,
    Hotel,
    Room,
    SearchCriteria,
)
from staysearch.services.availability import (
    AvailabilityResolver,
    count_occupancy,
    room_status,
)
from staysearch.utils.logging import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


def utc(year: int, month: int, day: int) -> dt.datetime:
    return dt.datetime(year, month, day, tzinfo=dt.UTC)


def stay(
    check_in: str, check_out: str, guests: int = 2, city: str | None = "Goa"
) -> SearchCriteria:
    return SearchCriteria.from_params(
        city=city, check_in=check_in, check_out=check_out, guests=guests
    )


@pytest.fixture
def single_hotel_store() -> Any:
    """Factory for a store with hotel H: one room type R, 2 units, capacity 2."""

    def _make(bookings: list[Booking], extra_rooms: list[Room] | None = None) -> MagicMock:
        store = MagicMock()
        store.list_hotels_by_city.return_value = [Hotel(hotel_id="H", name="H", city="Goa")]
        store.list_rooms_for_hotel.return_value = [
            Room(room_id="R", hotel_id="H", capacity=2, total_rooms=2, price=100000),
            *(extra_rooms or []),
        ]
        store.list_confirmed_bookings.return_value = bookings
        return store

    return _make


def confirmed(booking_id: str, check_in: dt.datetime, check_out: dt.datetime) -> Booking:
    return Booking(
        booking_id=booking_id,
        hotel_id="H",
        room_id="R",
        check_in=check_in,
        check_out=check_out,
        status=BookingStatus.CONFIRMED,
    )


class TestOverlapExamples:
    """Worked examples for a single room type with two units."""

    def test_booking_ending_at_check_in_does_not_count(
        self, single_hotel_store: Any, settings: Settings
    ) -> None:
        store = single_hotel_store(
            [
                confirmed("b1", utc(2025, 1, 10), utc(2025, 1, 12)),
                confirmed("b2", utc(2025, 1, 11), utc(2025, 1, 14)),
            ]
        )
        resolver = AvailabilityResolver(store, settings)

        hotels = resolver.resolve(stay("2025-01-12", "2025-01-15"))

        assert [h.hotel_id for h in hotels] == ["H"]

    def test_all_units_taken_excludes_hotel(
        self, single_hotel_store: Any, settings: Settings
    ) -> None:
        store = single_hotel_store(
            [
                confirmed("b1", utc(2025, 1, 10), utc(2025, 1, 12)),
                confirmed("b2", utc(2025, 1, 11), utc(2025, 1, 14)),
                confirmed("b3", utc(2025, 1, 13), utc(2025, 1, 16)),
            ]
        )
        resolver = AvailabilityResolver(store, settings)

        assert resolver.resolve(stay("2025-01-12", "2025-01-15")) == []

    def test_another_room_type_keeps_hotel_available(
        self, single_hotel_store: Any, settings: Settings
    ) -> None:
        store = single_hotel_store(
            [
                confirmed("b2", utc(2025, 1, 11), utc(2025, 1, 14)),
                confirmed("b3", utc(2025, 1, 13), utc(2025, 1, 16)),
            ],
            extra_rooms=[
                Room(room_id="R2", hotel_id="H", capacity=2, total_rooms=1, price=120000)
            ],
        )
        resolver = AvailabilityResolver(store, settings)

        assert [h.hotel_id for h in resolver.resolve(stay("2025-01-12", "2025-01-15"))] == ["H"]

    def test_guests_above_capacity_excludes_room(
        self, single_hotel_store: Any, settings: Settings
    ) -> None:
        store = single_hotel_store([])
        resolver = AvailabilityResolver(store, settings)

        assert resolver.resolve(stay("2025-01-12", "2025-01-15", guests=3)) == []

    @pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CANCELLED])
    def test_non_confirmed_bookings_never_reduce_availability(
        self, single_hotel_store: Any, settings: Settings, status: BookingStatus
    ) -> None:
        bookings = [
            confirmed(f"b{i}", utc(2025, 1, 12), utc(2025, 1, 15)).model_copy(
                update={"status": status}
            )
            for i in range(5)
        ]
        resolver = AvailabilityResolver(single_hotel_store(bookings), settings)

        assert len(resolver.resolve(stay("2025-01-12", "2025-01-15"))) == 1

    def test_booking_starting_at_check_out_does_not_count(
        self, single_hotel_store: Any, settings: Settings
    ) -> None:
        bookings = [
            confirmed("b1", utc(2025, 1, 15), utc(2025, 1, 18)),
            confirmed("b2", utc(2025, 1, 15), utc(2025, 1, 20)),
        ]
        resolver = AvailabilityResolver(single_hotel_store(bookings), settings)

        assert len(resolver.resolve(stay("2025-01-12", "2025-01-15"))) == 1


class TestResolve:
    """Tests for AvailabilityResolver.resolve() orchestration."""

    def test_no_dates_returns_every_city_hotel_without_inventory_fetch(
        self, mock_store: MagicMock, settings: Settings
    ) -> None:
        resolver = AvailabilityResolver(mock_store, settings)

        hotels = resolver.resolve(SearchCriteria.from_params(city="Goa"))

        assert [h.hotel_id for h in hotels] == ["h1", "h2", "h3"]
        mock_store.list_confirmed_bookings.assert_not_called()
        mock_store.list_rooms_for_hotel.assert_not_called()

    def test_partial_dates_behave_like_no_dates(
        self, mock_store: MagicMock, settings: Settings
    ) -> None:
        resolver = AvailabilityResolver(mock_store, settings)

        hotels = resolver.resolve(
            SearchCriteria.from_params(city="Goa", check_in="2025-01-12")
        )

        assert len(hotels) == 3
        mock_store.list_confirmed_bookings.assert_not_called()

    def test_empty_city_short_circuits(self, mock_store: MagicMock, settings: Settings) -> None:
        resolver = AvailabilityResolver(mock_store, settings)

        assert resolver.resolve(stay("2025-01-12", "2025-01-15", city="Atlantis")) == []
        mock_store.list_confirmed_bookings.assert_not_called()
        mock_store.list_rooms_for_hotel.assert_not_called()

    def test_all_cities_passes_none_to_store(
        self, mock_store: MagicMock, settings: Settings
    ) -> None:
        resolver = AvailabilityResolver(mock_store, settings)

        hotels = resolver.resolve(SearchCriteria.from_params(city="All"))

        mock_store.list_hotels_by_city.assert_called_once_with(None)
        assert len(hotels) == 4

    def test_store_side_filter_uses_check_in_boundary(
        self, mock_store: MagicMock, settings: Settings
    ) -> None:
        resolver = AvailabilityResolver(mock_store, settings)

        resolver.resolve(stay("2025-01-12", "2025-01-15"))

        mock_store.list_confirmed_bookings.assert_called_once_with(
            ["h1", "h2", "h3"], utc(2025, 1, 12)
        )
        assert mock_store.list_rooms_for_hotel.call_count == 3

    def test_preserves_store_order_and_drops_sold_out(
        self, mock_store: MagicMock, settings: Settings, make_booking: Any
    ) -> None:
        # h1 has a single unit which is taken; h3 has no units at all
        mock_store.list_confirmed_bookings.return_value = [
            make_booking(check_in=utc(2025, 1, 11), check_out=utc(2025, 1, 13)),
        ]
        resolver = AvailabilityResolver(mock_store, settings)

        hotels = resolver.resolve(stay("2025-01-12", "2025-01-15"))

        assert [h.hotel_id for h in hotels] == ["h2"]

    def test_booking_counts_only_against_its_own_room_type(
        self, mock_store: MagicMock, settings: Settings, make_booking: Any
    ) -> None:
        # Same room_id, different hotel
        mock_store.list_confirmed_bookings.return_value = [
            make_booking(hotel_id="h2", check_in=utc(2025, 1, 11), check_out=utc(2025, 1, 13)),
        ]
        resolver = AvailabilityResolver(mock_store, settings)

        hotels = resolver.resolve(stay("2025-01-12", "2025-01-15"))

        assert [h.hotel_id for h in hotels] == ["h1", "h2"]

    def test_hotel_without_rooms_is_not_available(
        self, mock_store: MagicMock, settings: Settings
    ) -> None:
        mock_store.list_rooms_for_hotel.side_effect = lambda hotel_id: []
        resolver = AvailabilityResolver(mock_store, settings)

        assert resolver.resolve(stay("2025-01-12", "2025-01-15")) == []

    def test_store_error_propagates(self, mock_store: MagicMock, settings: Settings) -> None:
        mock_store.list_confirmed_bookings.side_effect = BookingError(
            ErrorCode.SEARCH_UNAVAILABLE, details={"reason": "ThrottlingException"}
        )
        resolver = AvailabilityResolver(mock_store, settings)

        with pytest.raises(BookingError) as exc_info:
            resolver.resolve(stay("2025-01-12", "2025-01-15"))

        assert exc_info.value.code == ErrorCode.SEARCH_UNAVAILABLE

    def test_store_error_waits_for_running_fetches(
        self, mock_store: MagicMock, settings: Settings
    ) -> None:
        rooms_started = threading.Event()
        lock = threading.Lock()
        running = 0

        def failing_bookings(hotel_ids: list[str], check_out_after: dt.datetime) -> list[Any]:
            rooms_started.wait(1)
            raise BookingError(ErrorCode.SEARCH_UNAVAILABLE)

        def slow_rooms(hotel_id: str) -> list[Room]:
            nonlocal running
            with lock:
                running += 1
            rooms_started.set()
            time.sleep(0.05)
            with lock:
                running -= 1
            return []

        mock_store.list_confirmed_bookings.side_effect = failing_bookings
        mock_store.list_rooms_for_hotel.side_effect = slow_rooms
        resolver = AvailabilityResolver(mock_store, settings)

        with pytest.raises(BookingError):
            resolver.resolve(stay("2025-01-12", "2025-01-15"))

        # No fetch keeps hitting the store after the request failed
        assert running == 0

    def test_hotel_listing_error_propagates(
        self, mock_store: MagicMock, settings: Settings
    ) -> None:
        mock_store.list_hotels_by_city.side_effect = BookingError(ErrorCode.SEARCH_UNAVAILABLE)
        resolver = AvailabilityResolver(mock_store, settings)

        with pytest.raises(BookingError):
            resolver.resolve(SearchCriteria.from_params(city="Goa"))

    def test_slow_fetch_raises_timeout(self, mock_store: MagicMock) -> None:
        release = threading.Event()

        def slow_rooms(hotel_id: str) -> list[Room]:
            release.wait(5)
            return []

        mock_store.list_rooms_for_hotel.side_effect = slow_rooms
        resolver = AvailabilityResolver(
            mock_store, Settings(aws_region="eu-west-1", search_timeout_seconds=0.1)
        )

        try:
            with pytest.raises(BookingError) as exc_info:
                resolver.resolve(stay("2025-01-12", "2025-01-15"))
        finally:
            release.set()

        assert exc_info.value.code == ErrorCode.SEARCH_UNAVAILABLE
        assert exc_info.value.details == {"reason": "timeout"}

    def test_correlation_id_reaches_worker_threads(
        self, mock_store: MagicMock, settings: Settings
    ) -> None:
        seen: list[str | None] = []
        rooms = mock_store.list_rooms_for_hotel.side_effect

        def recording_rooms(hotel_id: str) -> list[Room]:
            seen.append(get_correlation_id())
            return rooms(hotel_id)

        mock_store.list_rooms_for_hotel.side_effect = recording_rooms
        resolver = AvailabilityResolver(mock_store, settings)

        set_correlation_id("cid-search-1")
        try:
            resolver.resolve(stay("2025-01-12", "2025-01-15"))
        finally:
            clear_correlation_id()

        assert seen == ["cid-search-1"] * 3


class TestRoomAvailability:
    """Tests for AvailabilityResolver.room_availability()."""

    def test_reports_each_room_type(
        self, mock_store: MagicMock, settings: Settings, make_booking: Any
    ) -> None:
        mock_store.list_confirmed_bookings.return_value = [
            make_booking(hotel_id="h2", check_in=utc(2025, 1, 11), check_out=utc(2025, 1, 13)),
        ]
        resolver = AvailabilityResolver(mock_store, settings)

        rooms = resolver.room_availability("h2", stay("2025-01-12", "2025-01-15"))

        assert len(rooms) == 1
        assert rooms[0].booked_rooms == 1
        assert rooms[0].available_rooms == 1
        assert rooms[0].is_available is True
        mock_store.list_confirmed_bookings.assert_called_once_with(["h2"], utc(2025, 1, 12))

    def test_without_dates_reports_all_units_free(
        self, mock_store: MagicMock, settings: Settings
    ) -> None:
        resolver = AvailabilityResolver(mock_store, settings)

        rooms = resolver.room_availability("h2", SearchCriteria.from_params(guests="2"))

        assert rooms[0].booked_rooms == 0
        assert rooms[0].available_rooms == 2
        mock_store.list_confirmed_bookings.assert_not_called()

    def test_unknown_hotel(self, mock_store: MagicMock, settings: Settings) -> None:
        resolver = AvailabilityResolver(mock_store, settings)

        with pytest.raises(BookingError) as exc_info:
            resolver.room_availability("missing", SearchCriteria())

        assert exc_info.value.code == ErrorCode.HOTEL_NOT_FOUND


class TestHelpers:
    """Tests for count_occupancy() and room_status()."""

    def test_count_occupancy_keys_by_hotel_and_room(self, make_booking: Any) -> None:
        bookings = [
            make_booking(booking_id="b1"),
            make_booking(booking_id="b2"),
            make_booking(booking_id="b3", room_id="r2"),
            make_booking(booking_id="b4", status=BookingStatus.PENDING),
        ]

        occupancy = count_occupancy(bookings, utc(2025, 1, 11), utc(2025, 1, 12))

        assert occupancy[("h1", "r1")] == 2
        assert occupancy[("h1", "r2")] == 1
        assert occupancy[("h2", "r1")] == 0

    def test_room_status_over_booked_never_negative(self) -> None:
        room = Room(room_id="r1", hotel_id="h1", capacity=2, total_rooms=1, price=0)

        status = room_status(room, booked_rooms=3, guests=1)

        assert status.available_rooms == 0
        assert status.is_available is False

    def test_room_status_capacity_check(self) -> None:
        room = Room(room_id="r1", hotel_id="h1", capacity=2, total_rooms=5, price=0)

        status = room_status(room, booked_rooms=0, guests=3)

        assert status.fits_guests is False
        assert status.is_available is False

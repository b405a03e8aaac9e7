"""Pytest configuration and fixtures for StaySearch backend tests.

This module provides reusable fixtures for testing:
- DynamoDB mocking with moto
- A mocked HotelStore for resolver and API tests
- Sample hotels, room types and bookings
"""

import datetime as dt
import os
from typing import Any, Generator
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-hotel")

# Only set fake credentials for moto if no real credentials are present
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from staysearch.config import Settings, get_settings  # noqa: E402
from staysearch.models import (  # noqa: E402
    Booking,
    BookingStatus,
    Hotel,
    Room,
    RoomType,
)
from staysearch.services.hotel_store import (  # noqa: E402
    DynamoDBHotelStore,
    table_definitions,
)


def utc(year: int, month: int, day: int) -> dt.datetime:
    """Midnight UTC on the given day."""
    return dt.datetime(year, month, day, tzinfo=dt.UTC)


# === Singleton Fixtures ===


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset cached settings, store and services before and after each test.

    This ensures tests using mock_aws get a fresh store instance
    inside the mock context rather than reusing one from a previous
    test or non-mocked context.
    """
    from staysearch_api.dependencies import reset_services

    reset_services()
    yield
    reset_services()


# === DynamoDB Fixtures ===


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    if not os.environ.get("AWS_PROFILE"):
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"


@pytest.fixture
def dynamodb_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Create a mocked DynamoDB client."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name="eu-west-1")
        yield client


@pytest.fixture
def create_tables(dynamodb_client: Any) -> None:
    """Create the hotels, rooms and bookings tables."""
    for table_config in table_definitions(get_settings()):
        dynamodb_client.create_table(**table_config)


@pytest.fixture
def store(create_tables: None) -> DynamoDBHotelStore:
    """DynamoDB store backed by moto tables."""
    return DynamoDBHotelStore(get_settings())


@pytest.fixture
def settings() -> Settings:
    """Settings with a short fetch deadline."""
    return Settings(
        environment="test",
        table_prefix="test-hotel",
        aws_region="eu-west-1",
        search_timeout_seconds=2.0,
    )


# === Sample Data Fixtures ===


@pytest.fixture
def sample_hotels() -> list[Hotel]:
    """Three hotels in Goa and one in Jaipur."""
    return [
        Hotel(hotel_id="h1", slug="sea-breeze", name="Sea Breeze", city="Goa", rating=4.5),
        Hotel(hotel_id="h2", slug="palm-grove", name="Palm Grove", city="Goa", rating=4.0),
        Hotel(hotel_id="h3", slug="sunset-bay", name="Sunset Bay", city="Goa", rating=3.5),
        Hotel(hotel_id="h4", slug="pink-palace", name="Pink Palace", city="Jaipur"),
    ]


@pytest.fixture
def sample_rooms() -> dict[str, list[Room]]:
    """Room types keyed by hotel id.

    h1 has one double with a single unit, h2 a family suite, h3 a
    sold-out type with zero units.
    """
    return {
        "h1": [
            Room(room_id="r1", hotel_id="h1", capacity=2, total_rooms=1, price=350000),
        ],
        "h2": [
            Room(
                room_id="r1",
                hotel_id="h2",
                room_type=RoomType.SUITE,
                capacity=4,
                total_rooms=2,
                price=900000,
            ),
        ],
        "h3": [
            Room(room_id="r1", hotel_id="h3", capacity=2, total_rooms=0, price=150000),
        ],
        "h4": [
            Room(room_id="r1", hotel_id="h4", capacity=2, total_rooms=3, price=250000),
        ],
    }


@pytest.fixture
def make_booking() -> Any:
    """Factory for bookings with sensible defaults."""

    def _make(
        booking_id: str = "b1",
        hotel_id: str = "h1",
        room_id: str = "r1",
        check_in: dt.datetime | None = None,
        check_out: dt.datetime | None = None,
        status: BookingStatus = BookingStatus.CONFIRMED,
        user_id: str = "user-1",
    ) -> Booking:
        return Booking(
            booking_id=booking_id,
            hotel_id=hotel_id,
            room_id=room_id,
            user_id=user_id,
            check_in=check_in or utc(2025, 1, 10),
            check_out=check_out or utc(2025, 1, 12),
            status=status,
        )

    return _make


@pytest.fixture
def mock_store(sample_hotels: list[Hotel], sample_rooms: dict[str, list[Room]]) -> MagicMock:
    """MagicMock HotelStore serving the sample hotels and rooms."""
    mock = MagicMock()

    def list_hotels_by_city(city: str | None) -> list[Hotel]:
        return [h for h in sample_hotels if city is None or h.city == city]

    def get_hotel(hotel_id: str) -> Hotel | None:
        for hotel in sample_hotels:
            if hotel.hotel_id == hotel_id:
                return hotel.model_copy(update={"rooms": sample_rooms.get(hotel_id, [])})
        return None

    mock.list_hotels_by_city.side_effect = list_hotels_by_city
    mock.list_rooms_for_hotel.side_effect = lambda hotel_id: sample_rooms.get(hotel_id, [])
    mock.get_hotel.side_effect = get_hotel
    mock.list_confirmed_bookings.return_value = []
    return mock

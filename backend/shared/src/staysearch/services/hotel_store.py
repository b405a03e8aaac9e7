"""DynamoDB-backed data access for hotels, room types and bookings.

Table layout (names are ``{prefix}-{table}``):

- hotels: hash key ``hotel_id``; GSI ``city-index`` on ``city``
- rooms: hash key ``hotel_id``, range key ``room_id``
- bookings: hash key ``booking_id``; GSI ``status-check_out-index`` with
  hash ``status`` and range ``check_out``, and GSI ``user_id-check_in-index``
  with hash ``user_id`` and range ``check_in``

Instants are stored as ISO 8601 UTC strings (see to_storage_timestamp) and
normalized back to aware datetimes on read.
"""

import datetime as dt
import logging
import math
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Protocol

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from staysearch.config import Settings, get_settings
from staysearch.models import (
    Booking,
    BookingError,
    BookingStatus,
    ErrorCode,
    Hotel,
    Room,
    RoomType,
)
from staysearch.utils.timestamps import normalize_timestamp, to_storage_timestamp

logger = logging.getLogger(__name__)

HOTELS_TABLE = "hotels"
ROOMS_TABLE = "rooms"
BOOKINGS_TABLE = "bookings"
CITY_INDEX = "city-index"
STATUS_CHECK_OUT_INDEX = "status-check_out-index"
USER_CHECK_IN_INDEX = "user_id-check_in-index"


class HotelStore(Protocol):
    """Data access the resolver and booking service depend on."""

    def list_hotels_by_city(self, city: str | None) -> list[Hotel]: ...

    def list_confirmed_bookings(
        self,
        hotel_ids: list[str],
        check_out_after: dt.datetime,
    ) -> list[Booking]: ...

    def list_rooms_for_hotel(self, hotel_id: str) -> list[Room]: ...

    def get_hotel(self, hotel_id: str) -> Hotel | None: ...

    def get_booking(self, booking_id: str) -> Booking | None: ...

    def list_bookings_for_user(self, user_id: str) -> list[Booking]: ...

    def update_booking_status(
        self,
        booking_id: str,
        status: BookingStatus,
        expected_status: BookingStatus,
    ) -> bool: ...


# Module-level singleton for connection reuse
_hotel_store_instance: "DynamoDBHotelStore | None" = None


def get_hotel_store() -> "DynamoDBHotelStore":
    """Get or create the shared DynamoDB store.

    Returns:
        Shared DynamoDBHotelStore instance

    Raises:
        BookingError: SEARCH_UNAVAILABLE when no AWS region is configured
    """
    global _hotel_store_instance
    if _hotel_store_instance is None:
        _hotel_store_instance = DynamoDBHotelStore(get_settings())
    return _hotel_store_instance


def reset_hotel_store() -> None:
    """Reset the singleton instance (for testing only).

    This allows tests to create a fresh store inside a mock_aws context.
    """
    global _hotel_store_instance
    _hotel_store_instance = None


def chunked(items: list[str], size: int) -> Iterator[list[str]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size < 1:
        raise ValueError("size must be at least 1")
    for start in range(0, len(items), size):
        yield items[start : start + size]


@contextmanager
def _store_errors(operation: str, **context: str) -> Iterator[None]:
    """Translate botocore failures into SEARCH_UNAVAILABLE."""
    try:
        yield
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "Unknown")
        logger.error("DynamoDB %s failed: %s %s", operation, code, context)
        raise BookingError(
            ErrorCode.SEARCH_UNAVAILABLE,
            details={"operation": operation, "reason": code},
        ) from e
    except BotoCoreError as e:
        logger.error("DynamoDB %s failed: %s %s", operation, e, context)
        raise BookingError(
            ErrorCode.SEARCH_UNAVAILABLE,
            details={"operation": operation, "reason": type(e).__name__},
        ) from e


class DynamoDBHotelStore:
    """Hotel, room and booking access with environment-aware table names."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the store.

        Args:
            settings: Runtime settings. Defaults to get_settings().

        Raises:
            BookingError: SEARCH_UNAVAILABLE when no AWS region is configured
        """
        self.settings = settings or get_settings()
        if not self.settings.is_store_configured:
            logger.error(
                "DynamoDB store not configured: set AWS_REGION or AWS_DEFAULT_REGION. "
                "Hotel search and booking lookups are disabled."
            )
            raise BookingError(
                ErrorCode.SEARCH_UNAVAILABLE,
                details={"reason": "not_configured"},
            )
        # boto3 resources are not thread-safe; the resolver reads from a pool
        self._local = threading.local()
        with _store_errors("connect"):
            self._resource()

    def _resource(self) -> Any:
        """Get the DynamoDB resource for the calling thread."""
        resource = getattr(self._local, "dynamodb", None)
        if resource is None:
            resource = boto3.session.Session().resource(
                "dynamodb", region_name=self.settings.aws_region
            )
            self._local.dynamodb = resource
        return resource

    def _get_table(self, table: str) -> Any:
        """Get DynamoDB table resource."""
        return self._resource().Table(self.settings.table_name(table))

    # Generic paginated reads

    def _query_all(self, table: str, **kwargs: Any) -> list[dict[str, Any]]:
        """Query a table or GSI, following LastEvaluatedKey pagination."""
        items: list[dict[str, Any]] = []
        while True:
            response = self._get_table(table).query(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def _scan_all(self, table: str, **kwargs: Any) -> list[dict[str, Any]]:
        """Scan a table, following LastEvaluatedKey pagination."""
        items: list[dict[str, Any]] = []
        while True:
            response = self._get_table(table).scan(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    # Hotels

    def list_hotels_by_city(self, city: str | None) -> list[Hotel]:
        """List hotels in a city, or every hotel when city is None.

        Args:
            city: Exact city name to match

        Returns:
            Hotels in store order
        """
        with _store_errors("list_hotels_by_city", city=city or ""):
            if city:
                items = self._query_all(
                    HOTELS_TABLE,
                    IndexName=CITY_INDEX,
                    KeyConditionExpression=Key("city").eq(city),
                )
            else:
                items = self._scan_all(HOTELS_TABLE)
        return [item_to_hotel(item) for item in items]

    def get_hotel(self, hotel_id: str) -> Hotel | None:
        """Get one hotel with its room types attached.

        Args:
            hotel_id: Hotel primary key

        Returns:
            Hotel or None if not found
        """
        with _store_errors("get_hotel", hotel_id=hotel_id):
            response = self._get_table(HOTELS_TABLE).get_item(Key={"hotel_id": hotel_id})
        item = response.get("Item")
        if not item:
            return None
        hotel = item_to_hotel(item)
        return hotel.model_copy(update={"rooms": self.list_rooms_for_hotel(hotel_id)})

    def save_hotel(self, hotel: Hotel) -> None:
        """Write a hotel record (room types are stored separately)."""
        with _store_errors("save_hotel", hotel_id=hotel.hotel_id):
            self._get_table(HOTELS_TABLE).put_item(Item=hotel_to_item(hotel))

    # Rooms

    def list_rooms_for_hotel(self, hotel_id: str) -> list[Room]:
        """List the room types of one hotel."""
        with _store_errors("list_rooms_for_hotel", hotel_id=hotel_id):
            items = self._query_all(
                ROOMS_TABLE,
                KeyConditionExpression=Key("hotel_id").eq(hotel_id),
            )
        return [item_to_room(item) for item in items]

    def save_room(self, room: Room) -> None:
        """Write a room type record."""
        with _store_errors("save_room", hotel_id=room.hotel_id, room_id=room.room_id):
            self._get_table(ROOMS_TABLE).put_item(Item=room_to_item(room))

    # Bookings

    def list_confirmed_bookings(
        self,
        hotel_ids: list[str],
        check_out_after: dt.datetime,
    ) -> list[Booking]:
        """List confirmed bookings that end after an instant.

        This is the store-side half of the interval overlap test. Hotel
        ids are sent in batches of BOOKING_QUERY_BATCH_SIZE, one query
        per batch, and the results merged.

        Args:
            hotel_ids: Candidate hotels
            check_out_after: Only bookings with check_out strictly after this

        Returns:
            Matching bookings
        """
        unique_ids = list(dict.fromkeys(hotel_ids))
        if not unique_ids:
            return []

        boundary = to_storage_timestamp(check_out_after)
        bookings: list[Booking] = []
        for batch in chunked(unique_ids, self.settings.booking_query_batch_size):
            with _store_errors("list_confirmed_bookings", hotels=str(len(batch))):
                items = self._query_all(
                    BOOKINGS_TABLE,
                    IndexName=STATUS_CHECK_OUT_INDEX,
                    KeyConditionExpression=(
                        Key("status").eq(BookingStatus.CONFIRMED.value)
                        & Key("check_out").gt(boundary)
                    ),
                    FilterExpression=Attr("hotel_id").is_in(batch),
                )
            bookings.extend(_valid_bookings(items))

        logger.debug(
            "Fetched %d confirmed bookings for %d hotels in %d batches",
            len(bookings),
            len(unique_ids),
            math.ceil(len(unique_ids) / self.settings.booking_query_batch_size),
        )
        return bookings

    def get_booking(self, booking_id: str) -> Booking | None:
        """Get a booking by id, or None if not found."""
        with _store_errors("get_booking", booking_id=booking_id):
            response = self._get_table(BOOKINGS_TABLE).get_item(
                Key={"booking_id": booking_id}
            )
        item = response.get("Item")
        return item_to_booking(item) if item else None

    def list_bookings_for_user(self, user_id: str) -> list[Booking]:
        """List every booking a user made, latest check-in first.

        All statuses are returned. Records that cannot be read are skipped.
        """
        with _store_errors("list_bookings_for_user", user_id=user_id):
            items = self._query_all(
                BOOKINGS_TABLE,
                IndexName=USER_CHECK_IN_INDEX,
                KeyConditionExpression=Key("user_id").eq(user_id),
                ScanIndexForward=False,
            )
        return list(_valid_bookings(items))

    def save_booking(self, booking: Booking) -> None:
        """Write a booking record."""
        with _store_errors("save_booking", booking_id=booking.booking_id):
            self._get_table(BOOKINGS_TABLE).put_item(Item=booking_to_item(booking))

    def update_booking_status(
        self,
        booking_id: str,
        status: BookingStatus,
        expected_status: BookingStatus,
    ) -> bool:
        """Change a booking's status if it still has the expected one.

        Args:
            booking_id: Booking primary key
            status: New status
            expected_status: Status the booking must currently have

        Returns:
            True if updated, False if the condition failed
        """
        with _store_errors("update_booking_status", booking_id=booking_id):
            try:
                self._get_table(BOOKINGS_TABLE).update_item(
                    Key={"booking_id": booking_id},
                    UpdateExpression="SET #s = :status, updated_at = :now",
                    ConditionExpression="#s = :expected",
                    ExpressionAttributeNames={"#s": "status"},
                    ExpressionAttributeValues={
                        ":status": status.value,
                        ":expected": expected_status.value,
                        ":now": dt.datetime.now(dt.UTC).isoformat(),
                    },
                )
                return True
            except ClientError as e:
                if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                    return False
                raise


def table_definitions(settings: Settings) -> list[dict[str, Any]]:
    """CreateTable parameters for every table the store reads.

    Used by the seed script and the test suite.
    """
    return [
        {
            "TableName": settings.table_name(HOTELS_TABLE),
            "KeySchema": [{"AttributeName": "hotel_id", "KeyType": "HASH"}],
            "AttributeDefinitions": [
                {"AttributeName": "hotel_id", "AttributeType": "S"},
                {"AttributeName": "city", "AttributeType": "S"},
            ],
            "GlobalSecondaryIndexes": [
                {
                    "IndexName": CITY_INDEX,
                    "KeySchema": [{"AttributeName": "city", "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                },
            ],
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": settings.table_name(ROOMS_TABLE),
            "KeySchema": [
                {"AttributeName": "hotel_id", "KeyType": "HASH"},
                {"AttributeName": "room_id", "KeyType": "RANGE"},
            ],
            "AttributeDefinitions": [
                {"AttributeName": "hotel_id", "AttributeType": "S"},
                {"AttributeName": "room_id", "AttributeType": "S"},
            ],
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": settings.table_name(BOOKINGS_TABLE),
            "KeySchema": [{"AttributeName": "booking_id", "KeyType": "HASH"}],
            "AttributeDefinitions": [
                {"AttributeName": "booking_id", "AttributeType": "S"},
                {"AttributeName": "status", "AttributeType": "S"},
                {"AttributeName": "check_out", "AttributeType": "S"},
                {"AttributeName": "user_id", "AttributeType": "S"},
                {"AttributeName": "check_in", "AttributeType": "S"},
            ],
            "GlobalSecondaryIndexes": [
                {
                    "IndexName": STATUS_CHECK_OUT_INDEX,
                    "KeySchema": [
                        {"AttributeName": "status", "KeyType": "HASH"},
                        {"AttributeName": "check_out", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                },
                {
                    "IndexName": USER_CHECK_IN_INDEX,
                    "KeySchema": [
                        {"AttributeName": "user_id", "KeyType": "HASH"},
                        {"AttributeName": "check_in", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                },
            ],
            "BillingMode": "PAY_PER_REQUEST",
        },
    ]


# Item conversion. DynamoDB returns numbers as Decimal.


def item_to_hotel(item: dict[str, Any]) -> Hotel:
    """Convert DynamoDB item to Hotel model."""
    return Hotel(
        hotel_id=item["hotel_id"],
        slug=item.get("slug", item["hotel_id"]),
        name=item["name"],
        city=item["city"],
        description=item.get("description", ""),
        address=item.get("address"),
        images=list(item.get("images", [])),
        amenities=list(item.get("amenities", [])),
        rating=float(item.get("rating", 0)),
    )


def hotel_to_item(hotel: Hotel) -> dict[str, Any]:
    """Convert Hotel model to DynamoDB item."""
    item: dict[str, Any] = {
        "hotel_id": hotel.hotel_id,
        "slug": hotel.slug or hotel.hotel_id,
        "name": hotel.name,
        "city": hotel.city,
        "description": hotel.description,
        "images": hotel.images,
        "amenities": hotel.amenities,
        "rating": Decimal(str(hotel.rating)),
    }
    if hotel.address:
        item["address"] = hotel.address
    return item


def item_to_room(item: dict[str, Any]) -> Room:
    """Convert DynamoDB item to Room model."""
    return Room(
        room_id=item["room_id"],
        hotel_id=item["hotel_id"],
        room_type=RoomType(item.get("room_type", RoomType.STANDARD.value)),
        capacity=int(item["capacity"]),
        total_rooms=int(item["total_rooms"]),
        price=int(item.get("price", 0)),
    )


def room_to_item(room: Room) -> dict[str, Any]:
    """Convert Room model to DynamoDB item."""
    return {
        "hotel_id": room.hotel_id,
        "room_id": room.room_id,
        "room_type": room.room_type.value,
        "capacity": room.capacity,
        "total_rooms": room.total_rooms,
        "price": room.price,
    }


def item_to_booking(item: dict[str, Any]) -> Booking:
    """Convert DynamoDB item to Booking model.

    Raises:
        ValueError: If a stored instant cannot be parsed
    """
    check_in = normalize_timestamp(item.get("check_in"))
    check_out = normalize_timestamp(item.get("check_out"))
    if check_in is None or check_out is None:
        raise ValueError(f"Booking {item.get('booking_id')} has unparsable stay dates")

    return Booking(
        booking_id=item["booking_id"],
        hotel_id=item["hotel_id"],
        room_id=item["room_id"],
        user_id=item.get("user_id", ""),
        check_in=check_in,
        check_out=check_out,
        status=BookingStatus(item.get("status", BookingStatus.PENDING.value)),
        guests=int(item.get("guests", 1)),
        total_price=int(item.get("total_price", 0)),
        customer_name=item.get("customer_name"),
        customer_email=item.get("customer_email"),
    )


def _valid_bookings(items: list[dict[str, Any]]) -> Iterator[Booking]:
    """Convert booking items, skipping records that cannot be read.

    A booking whose dates are unparsable or reversed holds no usable
    interval, so it cannot occupy a room.
    """
    for item in items:
        try:
            yield item_to_booking(item)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(
                "Skipping malformed booking %s: %s", item.get("booking_id", "<no id>"), e
            )


def booking_to_item(booking: Booking) -> dict[str, Any]:
    """Convert Booking model to DynamoDB item."""
    item: dict[str, Any] = {
        "booking_id": booking.booking_id,
        "hotel_id": booking.hotel_id,
        "room_id": booking.room_id,
        "check_in": to_storage_timestamp(booking.check_in),
        "check_out": to_storage_timestamp(booking.check_out),
        "status": booking.status.value,
        "guests": booking.guests,
        "total_price": booking.total_price,
    }
    # Index keys cannot be empty strings
    if booking.user_id:
        item["user_id"] = booking.user_id
    if booking.customer_name:
        item["customer_name"] = booking.customer_name
    if booking.customer_email:
        item["customer_email"] = booking.customer_email
    return item

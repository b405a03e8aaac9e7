#!/usr/bin/env python3
"""Seed development database with sample hotels, room types and bookings.

Populates the hotels, rooms and bookings tables so the search API has
something to find:
- A handful of hotels across several cities
- Standard/Deluxe/Suite room types with capacity and unit counts
- Confirmed, pending and cancelled bookings in the coming weeks

Usage:
    python scripts/seed_data.py --env dev
    python scripts/seed_data.py --env dev --create-tables
    python scripts/seed_data.py --env dev --clear-first
"""

import argparse
import datetime as dt
import os
import sys
from typing import Any

import boto3
from botocore.exceptions import ClientError

from staysearch.config import Settings
from staysearch.models import Booking, BookingStatus, Hotel, Room, RoomType
from staysearch.services.hotel_store import DynamoDBHotelStore, table_definitions

SAMPLE_HOTELS: list[dict[str, Any]] = [
    {
        "hotel_id": "sea-breeze-goa",
        "name": "Sea Breeze Resort",
        "city": "Goa",
        "description": "Beachfront resort with sunset views over the Arabian Sea.",
        "amenities": ["wifi", "pool", "restaurant", "parking"],
        "rating": 4.5,
        "rooms": [
            ("standard", RoomType.STANDARD, 2, 10, 350000),
            ("deluxe", RoomType.DELUXE, 3, 4, 550000),
        ],
    },
    {
        "hotel_id": "palm-grove-goa",
        "name": "Palm Grove Inn",
        "city": "Goa",
        "description": "Quiet garden rooms a short walk from the beach.",
        "amenities": ["wifi", "breakfast"],
        "rating": 4.0,
        "rooms": [("standard", RoomType.STANDARD, 2, 2, 220000)],
    },
    {
        "hotel_id": "lake-view-udaipur",
        "name": "Lake View Palace",
        "city": "Udaipur",
        "description": "Heritage palace rooms overlooking Lake Pichola.",
        "amenities": ["wifi", "spa", "restaurant"],
        "rating": 4.8,
        "rooms": [
            ("deluxe", RoomType.DELUXE, 2, 6, 900000),
            ("suite", RoomType.SUITE, 4, 2, 1800000),
        ],
    },
    {
        "hotel_id": "hill-crest-manali",
        "name": "Hill Crest Cottages",
        "city": "Manali",
        "description": "Wooden cottages with mountain views.",
        "amenities": ["parking", "fireplace"],
        "rating": 4.2,
        "rooms": [("suite", RoomType.SUITE, 5, 3, 700000)],
    },
]


def create_tables(settings: Settings, region: str) -> list[str]:
    """Create any missing tables.

    Returns:
        Names of the tables created
    """
    client = boto3.client("dynamodb", region_name=region)
    created: list[str] = []
    for definition in table_definitions(settings):
        try:
            client.create_table(**definition)
            client.get_waiter("table_exists").wait(TableName=definition["TableName"])
            created.append(definition["TableName"])
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceInUseException":
                raise
    return created


def clear_table(region: str, table_name: str) -> int:
    """Clear all items from a table.

    Returns:
        Number of items deleted
    """
    table = boto3.resource("dynamodb", region_name=region).Table(table_name)
    key_attrs = [k["AttributeName"] for k in table.key_schema]

    deleted = 0
    kwargs: dict[str, Any] = {}
    while True:
        response = table.scan(**kwargs)
        with table.batch_writer() as batch:
            for item in response.get("Items", []):
                batch.delete_item(Key={k: item[k] for k in key_attrs})
                deleted += 1
        if not response.get("LastEvaluatedKey"):
            return deleted
        kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]


def build_sample_data(today: dt.date) -> tuple[list[Hotel], list[Room], list[Booking]]:
    """Build sample hotels, room types and bookings relative to today."""
    hotels: list[Hotel] = []
    rooms: list[Room] = []
    for entry in SAMPLE_HOTELS:
        hotels.append(
            Hotel(
                hotel_id=entry["hotel_id"],
                slug=entry["hotel_id"],
                name=entry["name"],
                city=entry["city"],
                description=entry["description"],
                amenities=entry["amenities"],
                rating=entry["rating"],
            )
        )
        for room_id, room_type, capacity, total_rooms, price in entry["rooms"]:
            rooms.append(
                Room(
                    room_id=room_id,
                    hotel_id=entry["hotel_id"],
                    room_type=room_type,
                    capacity=capacity,
                    total_rooms=total_rooms,
                    price=price,
                )
            )

    def stay(offset: int, nights: int) -> tuple[dt.datetime, dt.datetime]:
        start = dt.datetime.combine(today + dt.timedelta(days=offset), dt.time(), dt.UTC)
        return start, start + dt.timedelta(days=nights)

    # Palm Grove is fully booked two weeks out; the rest shows mixed states
    sample_bookings = [
        ("BK-0001", "palm-grove-goa", "standard", BookingStatus.CONFIRMED, 14, 3),
        ("BK-0002", "palm-grove-goa", "standard", BookingStatus.CONFIRMED, 13, 4),
        ("BK-0003", "palm-grove-goa", "standard", BookingStatus.PENDING, 14, 2),
        ("BK-0004", "sea-breeze-goa", "deluxe", BookingStatus.CONFIRMED, 14, 5),
        ("BK-0005", "lake-view-udaipur", "suite", BookingStatus.CANCELLED, 20, 2),
        ("BK-0006", "hill-crest-manali", "suite", BookingStatus.CONFIRMED, 7, 7),
    ]
    bookings: list[Booking] = []
    for booking_id, hotel_id, room_id, status, offset, nights in sample_bookings:
        check_in, check_out = stay(offset, nights)
        bookings.append(
            Booking(
                booking_id=booking_id,
                hotel_id=hotel_id,
                room_id=room_id,
                user_id="seed-user",
                check_in=check_in,
                check_out=check_out,
                status=status,
                guests=2,
                customer_name="Seed Guest",
                customer_email="guest@example.com",
            )
        )

    return hotels, rooms, bookings


def seed(store: DynamoDBHotelStore, today: dt.date) -> dict[str, int]:
    """Write the sample data through the store.

    Returns:
        Count of records written per table
    """
    hotels, rooms, bookings = build_sample_data(today)
    for hotel in hotels:
        store.save_hotel(hotel)
    for room in rooms:
        store.save_room(room)
    for booking in bookings:
        store.save_booking(booking)
    return {"hotels": len(hotels), "rooms": len(rooms), "bookings": len(bookings)}


def main() -> int:
    """Run the seed script."""
    parser = argparse.ArgumentParser(description="Seed development database with test data")
    parser.add_argument(
        "--env",
        choices=["dev", "staging", "prod"],
        default="dev",
        help="Target environment (default: dev)",
    )
    parser.add_argument(
        "--region",
        default=os.environ.get("AWS_DEFAULT_REGION", "ap-south-1"),
        help="AWS region (default: ap-south-1 or AWS_DEFAULT_REGION env var)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before seeding",
    )
    parser.add_argument(
        "--clear-first",
        action="store_true",
        help="Clear existing data before seeding",
    )

    args = parser.parse_args()

    # Safety check for production
    if args.env == "prod":
        confirm = input("WARNING: You are about to modify PRODUCTION data. Type 'yes' to continue: ")
        if confirm.lower() != "yes":
            print("Aborted.")
            return 1

    settings = Settings(
        environment=args.env,
        table_prefix=os.environ.get("DYNAMODB_TABLE_PREFIX", f"hotel-{args.env}"),
        aws_region=args.region,
    )

    print(f"\nSeeding {args.env} environment (region: {args.region})\n")

    if args.create_tables:
        for name in create_tables(settings, args.region):
            print(f"  created table {name}")

    if args.clear_first:
        print("Clearing existing data...")
        for definition in table_definitions(settings):
            try:
                count = clear_table(args.region, definition["TableName"])
                print(f"  cleared {count} items from {definition['TableName']}")
            except ClientError as e:
                print(f"  could not clear {definition['TableName']}: {e}")

    counts = seed(DynamoDBHotelStore(settings), dt.date.today())
    for table, count in counts.items():
        print(f"  wrote {count} {table}")

    print("\nDone.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Timestamp normalization at the data-access boundary.

Booking records may carry instants as ISO strings, date-only strings,
epoch numbers (milliseconds), native ``date``/``datetime`` objects or
store-native timestamp objects exposing ``to_datetime()``/``ToDatetime()``.
Everything past the store works with timezone-aware UTC datetimes only.
"""

import datetime as dt
from decimal import Decimal
from typing import Any


def normalize_timestamp(value: Any) -> dt.datetime | None:
    """Convert a stored or user-supplied instant to an aware UTC datetime.

    Naive datetimes and date-only values are taken to be UTC (date-only
    values at midnight). Numbers are epoch milliseconds.

    Args:
        value: Raw timestamp value

    Returns:
        Aware UTC datetime, or None if the value is empty or unparsable
    """
    if value is None or value == "":
        return None

    for method in ("to_datetime", "ToDatetime"):
        converter = getattr(value, method, None)
        if callable(converter):
            return normalize_timestamp(converter())

    if isinstance(value, dt.datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value.astimezone(dt.UTC)

    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day, tzinfo=dt.UTC)

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            return dt.datetime.fromtimestamp(float(value) / 1000, tz=dt.UTC)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            if len(text) == 10:
                return normalize_timestamp(dt.date.fromisoformat(text))
            return normalize_timestamp(dt.datetime.fromisoformat(text))
        except ValueError:
            return None

    return None


def to_storage_timestamp(value: dt.datetime) -> str:
    """Render an instant in the fixed format used for stored range keys.

    Second precision and an explicit +00:00 offset keep lexicographic
    order equal to chronological order.
    """
    normalized = normalize_timestamp(value)
    if normalized is None:
        raise ValueError(f"Cannot store timestamp: {value!r}")
    return normalized.replace(microsecond=0).isoformat()

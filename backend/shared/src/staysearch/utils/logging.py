"""Logging with per-request correlation IDs.

The ID lives in a ContextVar. Search worker threads receive it through
contextvars.copy_context() (see services.availability), so every line a
request causes, on any thread, starts with the same ``[correlation-id]``.

Usage:
    from staysearch.utils.logging import correlation_scope, get_logger

    with correlation_scope(request.headers.get("X-Correlation-ID")):
        ...

    logger = get_logger(__name__)
    log_search_operation(logger, "resolve", city="Goa", available=3)
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

NO_CORRELATION_ID = "no-correlation-id"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: Incoming ID; a UUID4 is generated when empty

    Returns:
        The ID now in effect
    """
    cid = correlation_id or str(uuid.uuid4())
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation ID for the duration of a block.

    The previous ID is restored on exit rather than cleared, so a scope
    opened inside another one leaves the outer ID intact.
    """
    token = _correlation_id.set(correlation_id or str(uuid.uuid4()))
    try:
        yield _correlation_id.get()  # type: ignore[misc]
    finally:
        _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Stamp records with the correlation ID of the context that emitted them."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """``[correlation-id] <base format>`` plus any operation fields.

    Records logged through log_search_operation carry their fields in
    ``record.fields``; they are appended as ``key=value`` pairs.
    """

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = (
            getattr(record, "correlation_id", None)
            or get_correlation_id()
            or NO_CORRELATION_ID
        )
        line = f"[{correlation_id}] {super().format(record)}"

        fields: dict[str, Any] = getattr(record, "fields", None) or {}
        if fields:
            line += " | " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


def get_logger(name: str) -> logging.Logger:
    """Get a logger whose records always carry a correlation ID."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())
    return logger


def configure_logging(level: int | str = logging.INFO) -> None:
    """Route root logging through StructuredFormatter.

    Calling it again only updates the level.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)


def log_search_operation(
    logger: logging.Logger,
    operation: str,
    *,
    error: str | None = None,
    **fields: Any,
) -> None:
    """Log one search or booking operation.

    The message is the operation name; the fields travel on the record
    (``record.fields`` and one attribute each) for the formatter and for
    tests. None values are dropped. A non-empty ``error`` logs at ERROR.

    Args:
        logger: Logger instance
        operation: Operation name (e.g. "resolve", "cancel_booking")
        error: Failure description, if the operation failed
        **fields: Context such as city, hotel counts or booking_id
    """
    context = {key: value for key, value in fields.items() if value is not None}
    if error:
        context["error"] = error

    extra: dict[str, Any] = {**context, "operation": operation, "fields": context}
    logger.log(logging.ERROR if error else logging.INFO, operation, extra=extra)

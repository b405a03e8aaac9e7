"""FastAPI exception handlers for converting BookingError to HTTP responses.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 400 Bad Request: Invalid search input
- 403 Forbidden: Booking owned by another user
- 404 Not Found: Unknown hotel or booking
- 409 Conflict: Concurrent booking modification
- 503 Service Unavailable: Data store unreachable or unconfigured

A 503 lets clients tell "search is down" apart from "no hotels matched",
which is an empty 200 response.

Usage:
    from staysearch_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from staysearch.models.errors import BookingError, ErrorCode

logger = logging.getLogger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Backend availability -> 503 Service Unavailable
    ErrorCode.SEARCH_UNAVAILABLE: HTTP_503_SERVICE_UNAVAILABLE,
    # Input validation -> 400 Bad Request
    ErrorCode.INVALID_DATE_RANGE: HTTP_400_BAD_REQUEST,
    # Not found errors -> 404 Not Found
    ErrorCode.HOTEL_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND: HTTP_404_NOT_FOUND,
    # Authorization errors -> 403 Forbidden
    ErrorCode.UNAUTHORIZED: HTTP_403_FORBIDDEN,
    # Concurrent modification -> 409 Conflict
    ErrorCode.BOOKING_CONFLICT: HTTP_409_CONFLICT,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 400."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Handle BookingError exceptions and convert to JSON response.

    Args:
        request: The incoming request
        exc: The BookingError exception

    Returns:
        JSONResponse with ToolError body and mapped status code.
    """
    status_code = get_http_status_for_error(exc.code)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "%s %s failed: %s %s",
            request.method,
            request.url.path,
            exc.code.value,
            exc.details or {},
        )

    return JSONResponse(
        status_code=status_code,
        content=exc.to_tool_error().model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(BookingError, booking_error_handler)  # type: ignore[arg-type]

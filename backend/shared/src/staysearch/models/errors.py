"""Standard error codes for the hotel search service.

All services raise BookingError with one of these codes so the API layer
can render a consistent error envelope and HTTP status.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Search error codes (ERR_SEARCH_001-ERR_SEARCH_003)
    SEARCH_UNAVAILABLE = "ERR_SEARCH_001"
    INVALID_DATE_RANGE = "ERR_SEARCH_002"
    HOTEL_NOT_FOUND = "ERR_SEARCH_003"

    # Booking error codes (ERR_BOOKING_001-ERR_BOOKING_003)
    BOOKING_NOT_FOUND = "ERR_BOOKING_001"
    UNAUTHORIZED = "ERR_BOOKING_002"
    BOOKING_CONFLICT = "ERR_BOOKING_003"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    # Search errors
    ErrorCode.SEARCH_UNAVAILABLE: "Hotel search is temporarily unavailable",
    ErrorCode.INVALID_DATE_RANGE: "Check-out must be a valid date after check-in",
    ErrorCode.HOTEL_NOT_FOUND: "Hotel not found",
    # Booking errors
    ErrorCode.BOOKING_NOT_FOUND: "Booking not found",
    ErrorCode.UNAUTHORIZED: "User not authorized for this booking",
    ErrorCode.BOOKING_CONFLICT: "Booking was modified concurrently",
}

# Recovery suggestions for callers
ERROR_RECOVERY: dict[ErrorCode, str] = {
    # Search error recovery
    ErrorCode.SEARCH_UNAVAILABLE: "Show a service error and retry the search later",
    ErrorCode.INVALID_DATE_RANGE: "Ask for dates in YYYY-MM-DD format with check-out after check-in",
    ErrorCode.HOTEL_NOT_FOUND: "Verify the hotel identifier or search again",
    # Booking error recovery
    ErrorCode.BOOKING_NOT_FOUND: "Verify the booking identifier",
    ErrorCode.UNAUTHORIZED: "Sign in as the user who made the booking",
    ErrorCode.BOOKING_CONFLICT: "Reload the booking and try again",
}


class ToolError(BaseModel):
    """Standard error response format for failed operations.

    The recovery hint tells the caller what to do next.
    """

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ToolError":
        """Create a ToolError from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            A ToolError with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class BookingError(Exception):
    """Exception raised by search and booking operations.

    Can be caught and converted to a ToolError for API responses.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_tool_error(self) -> ToolError:
        """Convert this exception to a ToolError for responses."""
        return ToolError.from_code(self.code, self.details)

"""
Domain errors for the booking engine.

Every error carries a stable code, a category and the message shown to the
attendee. Categories let callers decide what to do with a failure:

  input           the request is malformed or references a missing event
  business        a well-formed request violates a booking rule
  infrastructure  the store failed; safe to retry
  ownership       cancellation / ticket access by someone else
"""

import enum
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from devevent.core.logging import get_logger

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again."


class ErrorCategory(str, enum.Enum):
    INPUT = "input"
    BUSINESS = "business"
    INFRASTRUCTURE = "infrastructure"
    OWNERSHIP = "ownership"


class BookingErrorCode(str, enum.Enum):
    EVENT_NOT_FOUND = "event_not_found"
    INVALID_INPUT = "invalid_input"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    DUPLICATE_BOOKING = "duplicate_booking"
    TICKET_GENERATION_FAILED = "ticket_generation_failed"
    STORE_UNAVAILABLE = "store_unavailable"
    BOOKING_NOT_FOUND = "booking_not_found"
    NOT_OWNER = "not_owner"


class BookingError(Exception):
    """Base class for all booking engine errors."""

    code: BookingErrorCode = BookingErrorCode.STORE_UNAVAILABLE
    category: ErrorCategory = ErrorCategory.INFRASTRUCTURE
    status_code: int = status.HTTP_503_SERVICE_UNAVAILABLE
    user_message: str = GENERIC_FAILURE_MESSAGE

    def __init__(self, message: Optional[str] = None):
        # Internal detail stays in the log, never in the user-facing message
        self.message = message or self.user_message
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"code": self.code.value, "message": self.user_message}


class InvalidInputError(BookingError):
    code = BookingErrorCode.INVALID_INPUT
    category = ErrorCategory.INPUT
    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    user_message = "Invalid booking request"


class EventNotFoundError(BookingError):
    code = BookingErrorCode.EVENT_NOT_FOUND
    category = ErrorCategory.INPUT
    status_code = status.HTTP_404_NOT_FOUND
    user_message = "Event not found"


class CapacityExceededError(BookingError):
    code = BookingErrorCode.CAPACITY_EXCEEDED
    category = ErrorCategory.BUSINESS
    status_code = status.HTTP_409_CONFLICT
    user_message = "Event is fully booked"


class DuplicateBookingError(BookingError):
    code = BookingErrorCode.DUPLICATE_BOOKING
    category = ErrorCategory.BUSINESS
    status_code = status.HTTP_409_CONFLICT
    user_message = "You have already booked this event"


class TicketGenerationFailedError(BookingError):
    code = BookingErrorCode.TICKET_GENERATION_FAILED


class StoreUnavailableError(BookingError):
    code = BookingErrorCode.STORE_UNAVAILABLE


class BookingNotFoundError(BookingError):
    code = BookingErrorCode.BOOKING_NOT_FOUND
    category = ErrorCategory.OWNERSHIP
    status_code = status.HTTP_404_NOT_FOUND
    user_message = "Booking not found"


class NotOwnerError(BookingError):
    code = BookingErrorCode.NOT_OWNER
    category = ErrorCategory.OWNERSHIP
    status_code = status.HTTP_403_FORBIDDEN
    user_message = "This booking belongs to another attendee"


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.category is ErrorCategory.INFRASTRUCTURE:
        logger.error("booking_error", code=exc.code.value, error=exc.message)
    else:
        logger.info("booking_error", code=exc.code.value, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


def register_exception_handlers(app) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)

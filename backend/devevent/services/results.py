"""
Tagged results returned by the booking engine.

Reservation and cancellation never raise for expected outcomes. Callers get
either the value or a BookingFailure and have to look at `ok`.
"""

from dataclasses import dataclass
from typing import Optional

from devevent.core.exceptions import BookingError, BookingErrorCode, ErrorCategory
from devevent.schemas.ticket import Ticket


@dataclass(frozen=True)
class BookingFailure:
    code: BookingErrorCode
    category: ErrorCategory
    message: str
    status_code: int

    @property
    def retryable(self) -> bool:
        return self.category is ErrorCategory.INFRASTRUCTURE

    @classmethod
    def from_error(cls, error: BookingError) -> "BookingFailure":
        return cls(
            code=error.code,
            category=error.category,
            message=error.user_message,
            status_code=error.status_code,
        )

    def to_detail(self) -> dict:
        return {"code": self.code.value, "message": self.message}


@dataclass(frozen=True)
class ReservationResult:
    ticket: Optional[Ticket] = None
    error: Optional[BookingFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, ticket: Ticket) -> "ReservationResult":
        return cls(ticket=ticket)

    @classmethod
    def failure(cls, error: BookingError) -> "ReservationResult":
        return cls(error=BookingFailure.from_error(error))


@dataclass(frozen=True)
class CancellationResult:
    booking_id: Optional[int] = None
    already_cancelled: bool = False
    error: Optional[BookingFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: BookingError) -> "CancellationResult":
        return cls(error=BookingFailure.from_error(error))

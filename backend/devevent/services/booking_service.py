"""
Booking engine with concurrency-safe reservation.

CONCURRENCY STRATEGY: Lock the event row, recount, insert
=========================================================

Problem:
  Two attendees try to book the last spot simultaneously.
  Both count 9 confirmed bookings out of 10, both insert.
  Result: Overbooking.

Solution:
  Every reservation runs one short transaction:

  1. SELECT ... FROM events WHERE id = :event_id FOR UPDATE
     Reservations for the same event queue on this row lock. Other events
     are unaffected.
  2. COUNT confirmed bookings for the event and compare with capacity
  3. Look for a confirmed booking by the same attendee
  4. INSERT the booking with a fresh ticket code and COMMIT (releases the lock)

  The database stays the final safety net:
  - Partial unique index on (event_id, attendee_email) WHERE status = 'confirmed'
    rejects a second confirmed booking for the same attendee
  - Unique constraint on ticket_code. A collision rolls the transaction back
    and the whole sequence runs again with a new code, at most
    TICKET_CODE_MAX_ATTEMPTS times

  Constraint violations come back as the same typed failures the checks
  above produce, so callers never see a raw IntegrityError.

  SQLite has no row locks. There every transaction starts with
  BEGIN IMMEDIATE (see db/session.py), which serializes writers globally.

Why no counter column:
  A booked/available counter maintained with increments and decrements is a
  second copy of the truth and drifts as soon as two writers race. Counting
  confirmed rows under the event lock is exact and cheap with the
  event_id index.

Expected outcomes (full event, duplicate attendee, bad input) are returned as
a ReservationResult, never raised.
"""

import json
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devevent.core.config import get_settings
from devevent.core.exceptions import (
    BookingError,
    BookingErrorCode,
    CapacityExceededError,
    DuplicateBookingError,
    ErrorCategory,
    EventNotFoundError,
    InvalidInputError,
    StoreUnavailableError,
    TicketGenerationFailedError,
)
from devevent.core.logging import get_logger
from devevent.core.metrics import booking_latency, record_booking_attempt, ticket_code_retries
from devevent.models.booking import (
    CONFIRMED_ATTENDEE_INDEX,
    TICKET_CODE_CONSTRAINT,
    Booking,
    BookingStatus,
    normalize_email,
)
from devevent.models.event import Event
from devevent.schemas.notification import BookingConfirmedMessage
from devevent.services import ticket_codes
from devevent.services.cache_service import invalidate_event_cache
from devevent.services.capacity_service import count_confirmed_bookings
from devevent.services.event_service import get_event_or_none
from devevent.services.interfaces.notifier import Notifier
from devevent.services.notification_service import send_notification
from devevent.services.results import ReservationResult
from devevent.services.ticket_service import build_ticket

logger = get_logger(__name__)
settings = get_settings()

# Upper bound of a PostgreSQL INTEGER primary key
MAX_EVENT_ID = 2**31 - 1


@dataclass(frozen=True)
class ReservationRequest:
    event_id: int
    attendee_email: str
    attendee_name: str
    metadata: dict[str, Any]


def _validate_request(event_id, attendee_email, attendee_name, metadata) -> ReservationRequest:
    if isinstance(event_id, str) and event_id.strip().isascii() and event_id.strip().isdigit():
        event_id = int(event_id)
    if not isinstance(event_id, int) or isinstance(event_id, bool) or not 0 < event_id <= MAX_EVENT_ID:
        raise InvalidInputError(f"Invalid event id: {event_id!r}")

    if not isinstance(attendee_email, str) or not attendee_email.strip():
        raise InvalidInputError("Attendee email is required")
    if not isinstance(attendee_name, str) or not attendee_name.strip():
        raise InvalidInputError("Attendee name is required")

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, Mapping):
        raise InvalidInputError("Attendee metadata must be an object")
    try:
        json.dumps(dict(metadata), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Attendee metadata is not JSON serializable: {exc}") from exc

    return ReservationRequest(
        event_id=event_id,
        attendee_email=normalize_email(attendee_email),
        attendee_name=attendee_name.strip(),
        metadata=dict(metadata),
    )


async def _has_confirmed_booking(db: AsyncSession, event_id: int, attendee_email: str) -> bool:
    result = await db.execute(
        select(Booking.id).where(
            Booking.event_id == event_id,
            Booking.attendee_email == attendee_email,
            Booking.status == BookingStatus.CONFIRMED.value,
        )
    )
    return result.first() is not None


def _violated_constraint(exc: IntegrityError) -> Optional[str]:
    """
    Map an IntegrityError to the bookings constraint it violated.
    PostgreSQL names the constraint, SQLite lists the columns.
    """
    message = str(exc.orig).lower()
    if "ticket_code" in message:
        return TICKET_CODE_CONSTRAINT
    if CONFIRMED_ATTENDEE_INDEX in message or "attendee_email" in message:
        return CONFIRMED_ATTENDEE_INDEX
    return None


async def _insert_booking(db: AsyncSession, request: ReservationRequest) -> tuple[Booking, Event]:
    """Run the locked check-then-insert sequence, retrying on ticket code collisions."""
    max_attempts = settings.TICKET_CODE_MAX_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        # Step 1: Lock the event row for the rest of the transaction
        event = await get_event_or_none(db, request.event_id, for_update=True)
        if event is None:
            raise EventNotFoundError(f"Event {request.event_id} not found")

        # Step 2: Capacity, counted live
        booked = await count_confirmed_bookings(db, event.id)
        if event.capacity is not None and booked >= event.capacity:
            raise CapacityExceededError(f"Event {event.id} is full ({booked}/{event.capacity})")

        # Step 3: One confirmed booking per attendee
        if await _has_confirmed_booking(db, event.id, request.attendee_email):
            raise DuplicateBookingError(f"{request.attendee_email} already booked event {event.id}")

        # Step 4: Insert with a fresh ticket code
        ticket_code = ticket_codes.generate_ticket_code()
        booking = Booking(
            event_id=event.id,
            attendee_email=request.attendee_email,
            attendee_name=request.attendee_name,
            ticket_code=ticket_code,
            status=BookingStatus.CONFIRMED.value,
            attendee_metadata=request.metadata,
        )
        db.add(booking)

        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            violated = _violated_constraint(exc)
            if violated == CONFIRMED_ATTENDEE_INDEX:
                raise DuplicateBookingError(
                    f"{request.attendee_email} already booked event {request.event_id}"
                ) from exc
            if violated != TICKET_CODE_CONSTRAINT:
                raise

            ticket_code_retries.inc()
            logger.warning(
                "ticket_code_collision",
                event_id=request.event_id,
                ticket_code=ticket_code,
                attempt=attempt,
            )
            continue

        return booking, event

    raise TicketGenerationFailedError(
        f"No unique ticket code after {max_attempts} attempts for event {request.event_id}"
    )


def _log_rejection(error: BookingError, event_id, attendee_email) -> None:
    if error.category is ErrorCategory.INFRASTRUCTURE:
        logger.error(
            "booking_failed",
            event_id=event_id,
            code=error.code.value,
            error=error.message,
        )
    else:
        logger.info(
            "booking_rejected",
            event_id=event_id,
            attendee_email=attendee_email,
            code=error.code.value,
            reason=error.message,
        )


async def reserve(
    db: AsyncSession,
    event_id,
    attendee_email: str,
    attendee_name: str,
    metadata: Optional[Mapping[str, Any]] = None,
    notifier: Optional[Notifier] = None,
) -> ReservationResult:
    """
    Reserve one spot at an event for an attendee.

    Returns a ReservationResult holding the ticket on success, or a failure
    with one of: event_not_found, invalid_input, capacity_exceeded,
    duplicate_booking, ticket_generation_failed, store_unavailable.

    The confirmation notification and listing cache invalidation run after
    the commit; their failures are logged and never affect the result.
    """
    started = time.perf_counter()
    try:
        request = _validate_request(event_id, attendee_email, attendee_name, metadata)
        booking, event = await _insert_booking(db, request)
    except BookingError as exc:
        await db.rollback()
        record_booking_attempt(exc.code.value)
        _log_rejection(exc, event_id, attendee_email)
        return ReservationResult.failure(exc)
    except SQLAlchemyError as exc:
        await db.rollback()
        record_booking_attempt(BookingErrorCode.STORE_UNAVAILABLE.value)
        logger.error("booking_store_error", event_id=event_id, error=str(exc), exc_info=True)
        return ReservationResult.failure(StoreUnavailableError(str(exc)))
    finally:
        booking_latency.observe(time.perf_counter() - started)

    record_booking_attempt("success")
    logger.info(
        "booking_created",
        booking_id=booking.id,
        event_id=event.id,
        attendee_email=booking.attendee_email,
        ticket_code=booking.ticket_code,
    )

    ticket = build_ticket(booking, event)
    await send_notification(
        BookingConfirmedMessage(
            attendee_email=booking.attendee_email,
            attendee_name=booking.attendee_name,
            event_name=event.title,
            event_date=event.date.strftime("%Y-%m-%d"),
            event_time=event.date.strftime("%H:%M"),
            event_location=event.location,
            ticket_code=booking.ticket_code,
        ),
        notifier,
    )
    await invalidate_event_cache()
    return ReservationResult.success(ticket)


async def list_bookings_for_attendee(db: AsyncSession, attendee_email: str) -> list[Booking]:
    """All bookings of an attendee, newest first, with their event loaded."""
    result = await db.execute(
        select(Booking)
        .where(Booking.attendee_email == normalize_email(attendee_email))
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())

"""
Cancellation flow: confirmed -> cancelled, owner only.

The transition is a conditional UPDATE (WHERE status = 'confirmed'), so two
concurrent cancels of the same booking transition it exactly once; the loser
sees rowcount 0 and reports an idempotent success. No counter is touched:
the freed spot shows up because capacity counts only confirmed rows. The
ticket code stays on the cancelled row and is never handed out again.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devevent.core.exceptions import (
    BookingError,
    BookingErrorCode,
    BookingNotFoundError,
    NotOwnerError,
    StoreUnavailableError,
)
from devevent.core.logging import get_logger
from devevent.core.metrics import record_cancellation
from devevent.db.base import utcnow
from devevent.models.booking import Booking, BookingStatus, normalize_email
from devevent.schemas.notification import BookingCancelledMessage
from devevent.services.cache_service import invalidate_event_cache
from devevent.services.interfaces.notifier import Notifier
from devevent.services.notification_service import send_notification
from devevent.services.results import CancellationResult

logger = get_logger(__name__)


async def _load_booking(db: AsyncSession, booking_id) -> Optional[Booking]:
    if not isinstance(booking_id, int) or isinstance(booking_id, bool):
        return None
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def cancel(
    db: AsyncSession,
    booking_id: int,
    requester_email: str,
    notifier: Optional[Notifier] = None,
) -> CancellationResult:
    """
    Cancel a booking on behalf of its attendee.

    Fails with booking_not_found, not_owner or store_unavailable. Cancelling
    an already cancelled booking succeeds with already_cancelled=True and
    sends no second notification.
    """
    try:
        booking = await _load_booking(db, booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")

        if not isinstance(requester_email, str) or booking.attendee_email != normalize_email(requester_email):
            raise NotOwnerError(f"Booking {booking_id} is not owned by {requester_email}")

        transitioned = False
        if booking.is_confirmed:
            now = utcnow()
            result = await db.execute(
                update(Booking)
                .where(
                    Booking.id == booking.id,
                    Booking.status == BookingStatus.CONFIRMED.value,
                )
                .values(
                    status=BookingStatus.CANCELLED.value,
                    cancelled_at=now,
                    updated_at=now,
                )
            )
            transitioned = result.rowcount == 1
        await db.commit()
    except BookingError as exc:
        await db.rollback()
        record_cancellation(exc.code.value)
        logger.info(
            "booking_cancel_rejected",
            booking_id=booking_id,
            code=exc.code.value,
            reason=exc.message,
        )
        return CancellationResult.failure(exc)
    except SQLAlchemyError as exc:
        await db.rollback()
        record_cancellation(BookingErrorCode.STORE_UNAVAILABLE.value)
        logger.error("booking_cancel_store_error", booking_id=booking_id, error=str(exc), exc_info=True)
        return CancellationResult.failure(StoreUnavailableError(str(exc)))

    if not transitioned:
        record_cancellation("already_cancelled")
        logger.info("booking_already_cancelled", booking_id=booking.id)
        return CancellationResult(booking_id=booking.id, already_cancelled=True)

    record_cancellation("cancelled")
    logger.info(
        "booking_cancelled",
        booking_id=booking.id,
        event_id=booking.event_id,
        ticket_code=booking.ticket_code,
    )

    await send_notification(
        BookingCancelledMessage(
            attendee_email=booking.attendee_email,
            attendee_name=booking.attendee_name,
            event_name=booking.event.title,
            ticket_code=booking.ticket_code,
        ),
        notifier,
    )
    await invalidate_event_cache()
    return CancellationResult(booking_id=booking.id)

"""
Ticket projection, download and check-in verification.

A ticket is a view over a booking and its event. Nothing ticket-specific is
stored, so a ticket can never disagree with the booking it came from.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devevent.core.exceptions import BookingNotFoundError, NotOwnerError
from devevent.core.logging import get_logger
from devevent.models.booking import Booking, normalize_email
from devevent.models.event import Event
from devevent.schemas.ticket import Ticket, TicketVerification
from devevent.services.ticket_codes import ticket_qr_data_url

logger = get_logger(__name__)


def build_ticket(booking: Booking, event: Event, include_qr: bool = False) -> Ticket:
    return Ticket(
        booking_id=booking.id,
        ticket_code=booking.ticket_code,
        event_id=event.id,
        event_name=event.title,
        event_date=event.date,
        event_location=event.location,
        attendee_name=booking.attendee_name,
        attendee_email=booking.attendee_email,
        status=booking.status,
        metadata=booking.attendee_metadata or {},
        qr_code=ticket_qr_data_url(booking.ticket_code) if include_qr else None,
    )


async def get_ticket(db: AsyncSession, booking_id: int, requester_email: str) -> Ticket:
    """Re-project the ticket of a booking for display or download. Owner only."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()

    if booking is None:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    if booking.attendee_email != normalize_email(requester_email):
        raise NotOwnerError(f"Booking {booking_id} is not owned by {requester_email}")

    return build_ticket(booking, booking.event, include_qr=True)


async def verify_ticket(db: AsyncSession, ticket_code: str) -> TicketVerification:
    """Check-in lookup. Only confirmed bookings hold a valid ticket."""
    code = ticket_code.strip().upper()
    result = await db.execute(select(Booking).where(Booking.ticket_code == code))
    booking = result.scalar_one_or_none()

    if booking is None:
        logger.info("ticket_verification_unknown_code", ticket_code=code)
        raise BookingNotFoundError(f"No booking with ticket code {code}")

    logger.info("ticket_verified", ticket_code=code, booking_id=booking.id, status=booking.status)
    return TicketVerification(
        ticket_code=booking.ticket_code,
        valid=booking.is_confirmed,
        status=booking.status,
        event_id=booking.event_id,
        event_title=booking.event.title,
        attendee_name=booking.attendee_name,
    )

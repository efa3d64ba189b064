"""
Booking endpoints: reserve, cancel, my tickets.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from devevent.api.deps import get_attendee_email
from devevent.db.session import get_db
from devevent.schemas.booking import BookingCreate, BookingResponse, BookingCancelResponse
from devevent.schemas.ticket import Ticket
from devevent.services.booking_service import reserve, list_bookings_for_attendee
from devevent.services.cancellation_service import cancel
from devevent.services.results import BookingFailure
from devevent.services.ticket_service import get_ticket

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _raise_for_failure(failure: BookingFailure) -> None:
    raise HTTPException(status_code=failure.status_code, detail=failure.to_detail())


@router.post("/", response_model=Ticket, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Reserve a spot at an event and receive the ticket.

    409 when the event is full or the attendee already holds a booking,
    503 when the booking store is unavailable (safe to retry).
    """
    result = await reserve(
        db,
        booking_data.event_id,
        booking_data.attendee_email,
        booking_data.attendee_name,
        booking_data.metadata,
    )
    if not result.ok:
        _raise_for_failure(result.error)
    return result.ticket


@router.get("/", response_model=list[BookingResponse])
async def list_my_bookings(
    attendee_email: str = Depends(get_attendee_email),
    db: AsyncSession = Depends(get_db),
):
    """All bookings of the calling attendee, newest first."""
    bookings = await list_bookings_for_attendee(db, attendee_email)
    return [BookingResponse.from_booking(b) for b in bookings]


@router.get("/{booking_id}/ticket", response_model=Ticket)
async def download_ticket(
    booking_id: int,
    attendee_email: str = Depends(get_attendee_email),
    db: AsyncSession = Depends(get_db),
):
    """Ticket for display or download, with a QR code of the ticket code."""
    return await get_ticket(db, booking_id, attendee_email)


@router.delete("/{booking_id}", response_model=BookingCancelResponse)
async def cancel_booking_endpoint(
    booking_id: int,
    attendee_email: str = Depends(get_attendee_email),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking. Cancelling twice is not an error."""
    result = await cancel(db, booking_id, attendee_email)
    if not result.ok:
        _raise_for_failure(result.error)

    message = "Booking was already cancelled" if result.already_cancelled else "Booking cancelled successfully"
    return BookingCancelResponse(
        message=message,
        booking_id=result.booking_id,
        status="cancelled",
    )

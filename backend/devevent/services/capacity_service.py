"""
Capacity oracle: live booked / available counts per event.

Counts are always aggregated from confirmed bookings at call time. A snapshot
is only true at the moment it was taken; the reservation path recounts inside
its own locked transaction and never trusts a snapshot.
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from devevent.models.booking import Booking, BookingStatus
from devevent.schemas.event import CapacitySnapshot
from devevent.services.event_service import get_event


async def count_confirmed_bookings(db: AsyncSession, event_id: int) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Booking)
        .where(
            Booking.event_id == event_id,
            Booking.status == BookingStatus.CONFIRMED.value,
        )
    )
    return result.scalar_one()


def available_spots(capacity, booked: int):
    """Remaining spots, or None for unlimited events."""
    if capacity is None:
        return None
    # Capacity may have been lowered below the booked count by the organizer
    return max(capacity - booked, 0)


async def get_capacity(db: AsyncSession, event_id: int) -> CapacitySnapshot:
    """Snapshot of capacity, booked and available spots for an event."""
    event = await get_event(db, event_id)
    booked = await count_confirmed_bookings(db, event_id)
    return CapacitySnapshot(
        event_id=event.id,
        capacity=event.capacity,
        booked=booked,
        available=available_spots(event.capacity, booked),
    )

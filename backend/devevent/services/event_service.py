"""
Read access to the event catalog.
Creating and editing events belongs to the catalog service, not here.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from devevent.core.exceptions import EventNotFoundError
from devevent.models.event import Event


async def get_event_or_none(db: AsyncSession, event_id: int, for_update: bool = False) -> Optional[Event]:
    """
    Look up an event by ID.
    With for_update the row stays locked until the transaction ends
    (ignored on SQLite, which locks the whole database instead).
    """
    query = select(Event).where(Event.id == event_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    event = await get_event_or_none(db, event_id)
    if not event:
        raise EventNotFoundError(f"Event {event_id} not found")
    return event


async def list_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    upcoming_only: bool = True,
) -> tuple[list[Event], int]:
    """
    List events with pagination.
    Uses the ix_events_date index for date filtering.
    """
    query = select(Event)

    if upcoming_only:
        query = query.where(Event.date >= datetime.now(timezone.utc))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.date.asc(), Event.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total

"""
Event catalog reads. Listings go through the Redis listing cache; capacity
is always counted live.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devevent.core.logging import get_logger
from devevent.db.session import get_db
from devevent.schemas.event import CapacitySnapshot, EventListResponse, EventResponse
from devevent.services.cache_service import get_cached_events, set_cached_events
from devevent.services.capacity_service import get_capacity
from devevent.services.event_service import get_event, list_events

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    upcoming_only: bool = Query(True),
    db: AsyncSession = Depends(get_db),
):
    """
    Paginated event listing, soonest first.
    Served from cache when possible; `cached` tells which.
    """
    cached = await get_cached_events(page, page_size, upcoming_only)
    if cached is not None:
        return EventListResponse.model_validate({**cached, "cached": True})

    events, total = await list_events(db, page, page_size, upcoming_only)
    listing = EventListResponse(
        events=[EventResponse.model_validate(e) for e in events],
        total=total,
        page=page,
        page_size=page_size,
    )
    await set_cached_events(page, page_size, upcoming_only, listing.model_dump(mode="json"))
    logger.debug("events_listed", page=page, total=total)
    return listing


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    return await get_event(db, event_id)


@router.get("/{event_id}/capacity", response_model=CapacitySnapshot)
async def get_capacity_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Live capacity snapshot; `capacity` and `available` are null for unlimited events."""
    return await get_capacity(db, event_id)

"""
Pydantic schemas for event read access and capacity snapshots.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class EventResponse(BaseModel):
    id: int
    title: str
    slug: Optional[str]
    description: Optional[str]
    date: datetime
    location: Optional[str]
    capacity: Optional[int]
    created_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False


class CapacitySnapshot(BaseModel):
    """
    Point-in-time view of an event's capacity.
    `capacity` and `available` are None for unlimited events.
    """

    event_id: int
    capacity: Optional[int]
    booked: int
    available: Optional[int]

    @property
    def is_full(self) -> bool:
        return self.available is not None and self.available <= 0

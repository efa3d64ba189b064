"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field

from devevent.models.booking import Booking


class BookingCreate(BaseModel):
    event_id: int
    attendee_email: EmailStr
    attendee_name: str = Field(..., min_length=1, max_length=255)
    metadata: dict[str, Any] = Field(default_factory=dict)


class BookingResponse(BaseModel):
    id: int
    event_id: int
    attendee_email: str
    attendee_name: str
    ticket_code: str
    status: str
    metadata: dict[str, Any]
    created_at: datetime
    cancelled_at: Optional[datetime]
    event_title: str
    event_date: datetime
    event_location: Optional[str]

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            event_id=booking.event_id,
            attendee_email=booking.attendee_email,
            attendee_name=booking.attendee_name,
            ticket_code=booking.ticket_code,
            status=booking.status,
            metadata=booking.attendee_metadata or {},
            created_at=booking.created_at,
            cancelled_at=booking.cancelled_at,
            event_title=booking.event.title,
            event_date=booking.event.date,
            event_location=booking.event.location,
        )


class BookingCancelResponse(BaseModel):
    message: str
    booking_id: int
    status: str

"""
Ticket views. A ticket is never stored; it is projected from a booking and
its event whenever it is shown or downloaded.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


class Ticket(BaseModel):
    booking_id: int
    ticket_code: str
    event_id: int
    event_name: str
    event_date: datetime
    event_location: Optional[str]
    attendee_name: str
    attendee_email: str
    status: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    qr_code: Optional[str] = None


class TicketVerification(BaseModel):
    """Check-in lookup result for a ticket code."""

    ticket_code: str
    valid: bool
    status: str
    event_id: int
    event_title: str
    attendee_name: str

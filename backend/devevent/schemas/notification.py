"""
Outbound notification payloads, consumed by the mailer outside this service.
"""

from typing import Optional
from pydantic import BaseModel


class BookingConfirmedMessage(BaseModel):
    attendee_email: str
    attendee_name: str
    event_name: str
    event_date: str
    event_time: str
    event_location: Optional[str]
    ticket_code: str

    kind: str = "booking_confirmed"


class BookingCancelledMessage(BaseModel):
    attendee_email: str
    attendee_name: str
    event_name: str
    ticket_code: str

    kind: str = "booking_cancelled"

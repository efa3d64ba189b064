from devevent.schemas.event import EventResponse, EventListResponse, CapacitySnapshot
from devevent.schemas.booking import BookingCreate, BookingResponse, BookingCancelResponse
from devevent.schemas.ticket import Ticket, TicketVerification
from devevent.schemas.notification import BookingConfirmedMessage, BookingCancelledMessage

__all__ = [
    "EventResponse", "EventListResponse", "CapacitySnapshot",
    "BookingCreate", "BookingResponse", "BookingCancelResponse",
    "Ticket", "TicketVerification",
    "BookingConfirmedMessage", "BookingCancelledMessage",
]

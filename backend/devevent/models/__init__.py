from devevent.models.event import Event
from devevent.models.booking import Booking, BookingStatus

__all__ = ["Event", "Booking", "BookingStatus"]

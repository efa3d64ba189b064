"""
Notifier interface.
The booking engine hands confirmation and cancellation messages to whichever
implementation is configured; delivery itself (email) happens elsewhere.
"""

from abc import ABC, abstractmethod

from devevent.schemas.notification import BookingCancelledMessage, BookingConfirmedMessage


class Notifier(ABC):
    """
    Interface for outbound booking notifications.

    Implementations:
    - LoggingNotifier: writes a structured log line (development, tests)
    - RedisNotifier: publishes JSON on a Redis channel for the mailer

    Called only after the booking change has been committed. Implementations
    may raise; the engine logs and drops the failure.
    """

    @abstractmethod
    async def booking_confirmed(self, message: BookingConfirmedMessage) -> None:
        pass

    @abstractmethod
    async def booking_cancelled(self, message: BookingCancelledMessage) -> None:
        pass

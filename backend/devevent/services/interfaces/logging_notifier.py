"""
Log-only notifier - no delivery.
"""

from devevent.core.logging import get_logger
from devevent.schemas.notification import BookingCancelledMessage, BookingConfirmedMessage
from devevent.services.interfaces.notifier import Notifier

logger = get_logger(__name__)


class LoggingNotifier(Notifier):
    """
    Record notifications in the application log.

    Use when:
    - Running locally without a mailer
    - Tests
    """

    async def booking_confirmed(self, message: BookingConfirmedMessage) -> None:
        logger.info(
            "notification_booking_confirmed",
            attendee_email=message.attendee_email,
            event_name=message.event_name,
            ticket_code=message.ticket_code,
        )

    async def booking_cancelled(self, message: BookingCancelledMessage) -> None:
        logger.info(
            "notification_booking_cancelled",
            attendee_email=message.attendee_email,
            event_name=message.event_name,
            ticket_code=message.ticket_code,
        )

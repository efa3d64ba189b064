"""
Notification dispatch for committed booking changes.

The booking engine calls send_notification after its transaction commits.
Delivery is fire-and-forget from the engine's point of view: a failing
notifier is counted and logged, and the booking it reports on stands.

Backend selection (NOTIFIER_BACKEND):
- log: LoggingNotifier (default)
- redis: RedisNotifier, for an out-of-process mailer
"""

from typing import Optional, Union

from devevent.core.config import get_settings
from devevent.core.logging import get_logger
from devevent.core.metrics import record_notification_failure
from devevent.schemas.notification import BookingCancelledMessage, BookingConfirmedMessage
from devevent.services.interfaces.logging_notifier import LoggingNotifier
from devevent.services.interfaces.notifier import Notifier
from devevent.services.interfaces.redis_notifier import RedisNotifier

logger = get_logger(__name__)


def build_notifier(backend: Optional[str] = None) -> Notifier:
    """Build the notifier named by NOTIFIER_BACKEND."""
    backend = backend or get_settings().NOTIFIER_BACKEND

    if backend == "redis":
        return RedisNotifier()
    if backend == "log":
        return LoggingNotifier()
    raise ValueError(f"Unknown notifier backend: {backend}")


# Singleton instance
_notifier: Optional[Notifier] = None


def get_notifier() -> Notifier:
    """Get notifier singleton."""
    global _notifier
    if _notifier is None:
        _notifier = build_notifier()
    return _notifier


async def send_notification(
    message: Union[BookingConfirmedMessage, BookingCancelledMessage],
    notifier: Optional[Notifier] = None,
) -> None:
    """Hand a message to the notifier. Failures are recorded, never raised."""
    notifier = notifier or get_notifier()
    try:
        if isinstance(message, BookingConfirmedMessage):
            await notifier.booking_confirmed(message)
        else:
            await notifier.booking_cancelled(message)
    except Exception as e:
        record_notification_failure(message.kind)
        logger.warning(
            "notification_failed",
            kind=message.kind,
            attendee_email=message.attendee_email,
            ticket_code=message.ticket_code,
            error=str(e),
        )

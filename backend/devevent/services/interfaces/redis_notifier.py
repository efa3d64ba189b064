"""
Redis-backed notifier.

Messages are published as JSON on NOTIFICATION_CHANNEL. A separate mailer
process subscribes and renders the confirmation / cancellation emails. If
nobody is subscribed the message is dropped.
"""

from devevent.core.config import get_settings
from devevent.core.logging import get_logger
from devevent.infrastructure.redis_client import get_redis
from devevent.schemas.notification import BookingCancelledMessage, BookingConfirmedMessage
from devevent.services.interfaces.notifier import Notifier

logger = get_logger(__name__)
settings = get_settings()


class NotificationUnavailableError(Exception):
    """Raised when the notification channel cannot be reached."""


class RedisNotifier(Notifier):
    """
    Publish booking notifications on a Redis pub/sub channel.

    Use when:
    - A mailer worker is subscribed to NOTIFICATION_CHANNEL
    """

    def __init__(self, channel: str = settings.NOTIFICATION_CHANNEL):
        self.channel = channel

    async def _publish(self, payload: str) -> int:
        client = await get_redis()
        if client is None:
            raise NotificationUnavailableError("redis is disabled or unreachable")
        receivers = await client.publish(self.channel, payload)
        logger.debug("notification_published", channel=self.channel, receivers=receivers)
        return receivers

    async def booking_confirmed(self, message: BookingConfirmedMessage) -> None:
        await self._publish(message.model_dump_json())

    async def booking_cancelled(self, message: BookingCancelledMessage) -> None:
        await self._publish(message.model_dump_json())

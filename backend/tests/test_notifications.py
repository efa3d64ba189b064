"""
Tests for notifier selection and fire-and-forget dispatch.
"""

import json

import pytest

from devevent.schemas.notification import BookingCancelledMessage, BookingConfirmedMessage
from devevent.services.interfaces import LoggingNotifier, RedisNotifier, redis_notifier
from devevent.services.interfaces.redis_notifier import NotificationUnavailableError
from devevent.services.notification_service import build_notifier, send_notification


def _confirmed() -> BookingConfirmedMessage:
    return BookingConfirmedMessage(
        attendee_email="ada@example.com",
        attendee_name="Ada",
        event_name="PyCon Meetup",
        event_date="2026-11-20",
        event_time="18:30",
        event_location="Test Venue",
        ticket_code="DE-1A2B3C4D",
    )


def test_build_notifier_backends():
    assert isinstance(build_notifier("log"), LoggingNotifier)
    assert isinstance(build_notifier("redis"), RedisNotifier)
    with pytest.raises(ValueError):
        build_notifier("carrier-pigeon")


@pytest.mark.asyncio
async def test_send_routes_by_message_kind(notifier):
    cancelled = BookingCancelledMessage(
        attendee_email="ada@example.com",
        attendee_name="Ada",
        event_name="PyCon Meetup",
        ticket_code="DE-1A2B3C4D",
    )

    await send_notification(_confirmed(), notifier)
    await send_notification(cancelled, notifier)

    assert [m.kind for m in notifier.confirmed] == ["booking_confirmed"]
    assert [m.kind for m in notifier.cancelled] == ["booking_cancelled"]


@pytest.mark.asyncio
async def test_send_swallows_notifier_errors(failing_notifier):
    await send_notification(_confirmed(), failing_notifier)


@pytest.mark.asyncio
async def test_redis_notifier_without_redis():
    # Redis is disabled in the test environment
    with pytest.raises(NotificationUnavailableError):
        await RedisNotifier().booking_confirmed(_confirmed())


@pytest.mark.asyncio
async def test_redis_notifier_publishes_json(monkeypatch):
    published = []

    class Channel:
        async def publish(self, channel, payload):
            published.append((channel, payload))
            return 1

    async def _get_redis():
        return Channel()

    monkeypatch.setattr(redis_notifier, "get_redis", _get_redis)

    await RedisNotifier(channel="mailer").booking_confirmed(_confirmed())

    channel, payload = published[0]
    assert channel == "mailer"
    assert json.loads(payload)["ticket_code"] == "DE-1A2B3C4D"
    assert json.loads(payload)["kind"] == "booking_confirmed"

"""
Tests for the cancellation flow: ownership, idempotency, freed capacity.
"""

import asyncio

import pytest

from devevent.core.exceptions import BookingErrorCode, ErrorCategory
from devevent.models.booking import Booking, BookingStatus
from devevent.services.booking_service import reserve
from devevent.services.capacity_service import get_capacity
from devevent.services.cancellation_service import cancel


async def _book(session_factory, event_id, email, notifier):
    async with session_factory() as db:
        result = await reserve(db, event_id, email, "Attendee", {}, notifier=notifier)
    assert result.ok
    return result.ticket


async def _cancel(session_factory, booking_id, email, notifier):
    async with session_factory() as db:
        return await cancel(db, booking_id, email, notifier=notifier)


async def _status(session_factory, booking_id) -> str:
    async with session_factory() as db:
        booking = await db.get(Booking, booking_id)
        return booking.status


@pytest.mark.asyncio
async def test_cancel_booking(session_factory, test_event, notifier):
    ticket = await _book(session_factory, test_event.id, "ada@example.com", notifier)

    result = await _cancel(session_factory, ticket.booking_id, "ada@example.com", notifier)

    assert result.ok
    assert result.booking_id == ticket.booking_id
    assert not result.already_cancelled
    assert await _status(session_factory, ticket.booking_id) == BookingStatus.CANCELLED.value

    assert len(notifier.cancelled) == 1
    assert notifier.cancelled[0].attendee_name == "Attendee"
    assert notifier.cancelled[0].event_name == "PyCon Meetup"


@pytest.mark.asyncio
async def test_cancel_keeps_ticket_code_and_sets_timestamp(session_factory, test_event, notifier):
    ticket = await _book(session_factory, test_event.id, "ada@example.com", notifier)
    await _cancel(session_factory, ticket.booking_id, "ada@example.com", notifier)

    async with session_factory() as db:
        booking = await db.get(Booking, ticket.booking_id)
        assert booking.ticket_code == ticket.ticket_code
        assert booking.cancelled_at is not None


@pytest.mark.asyncio
async def test_cancel_twice_is_idempotent(session_factory, test_event, notifier):
    ticket = await _book(session_factory, test_event.id, "ada@example.com", notifier)

    first = await _cancel(session_factory, ticket.booking_id, "ada@example.com", notifier)
    second = await _cancel(session_factory, ticket.booking_id, "ada@example.com", notifier)

    assert first.ok and not first.already_cancelled
    assert second.ok and second.already_cancelled
    assert len(notifier.cancelled) == 1


@pytest.mark.asyncio
async def test_concurrent_cancels_transition_once(session_factory, test_event, notifier):
    ticket = await _book(session_factory, test_event.id, "ada@example.com", notifier)

    results = await asyncio.gather(
        *(_cancel(session_factory, ticket.booking_id, "ada@example.com", notifier) for _ in range(3))
    )

    assert all(r.ok for r in results)
    assert sum(1 for r in results if not r.already_cancelled) == 1
    assert len(notifier.cancelled) == 1


@pytest.mark.asyncio
async def test_cancel_by_other_attendee(session_factory, test_event, notifier):
    ticket = await _book(session_factory, test_event.id, "ada@example.com", notifier)

    result = await _cancel(session_factory, ticket.booking_id, "mallory@example.com", notifier)

    assert not result.ok
    assert result.error.code == BookingErrorCode.NOT_OWNER
    assert result.error.category == ErrorCategory.OWNERSHIP
    assert result.error.status_code == 403
    assert await _status(session_factory, ticket.booking_id) == BookingStatus.CONFIRMED.value
    assert notifier.cancelled == []


@pytest.mark.asyncio
async def test_owner_email_compared_case_insensitively(session_factory, test_event, notifier):
    ticket = await _book(session_factory, test_event.id, "ada@example.com", notifier)

    result = await _cancel(session_factory, ticket.booking_id, " Ada@Example.COM", notifier)

    assert result.ok


@pytest.mark.asyncio
@pytest.mark.parametrize("booking_id", [424242, "not-an-id"])
async def test_cancel_missing_booking(session_factory, notifier, booking_id):
    result = await _cancel(session_factory, booking_id, "ada@example.com", notifier)

    assert result.error.code == BookingErrorCode.BOOKING_NOT_FOUND
    assert result.error.status_code == 404


@pytest.mark.asyncio
async def test_cancellation_frees_capacity(session_factory, create_event, notifier):
    event = await create_event("Elixir Evening", capacity=2)
    first = await _book(session_factory, event.id, "a@example.com", notifier)
    await _book(session_factory, event.id, "b@example.com", notifier)

    async with session_factory() as db:
        full = await get_capacity(db, event.id)
    assert full.available == 0

    assert (await _cancel(session_factory, first.booking_id, "a@example.com", notifier)).ok

    async with session_factory() as db:
        snapshot = await get_capacity(db, event.id)
    assert snapshot.booked == 1
    assert snapshot.available == 1

    newcomer = await _book(session_factory, event.id, "c@example.com", notifier)
    assert newcomer.ticket_code != first.ticket_code


@pytest.mark.asyncio
async def test_cancel_notification_failure_still_cancels(session_factory, test_event, notifier, failing_notifier):
    ticket = await _book(session_factory, test_event.id, "ada@example.com", notifier)

    result = await _cancel(session_factory, ticket.booking_id, "ada@example.com", failing_notifier)

    assert result.ok
    assert await _status(session_factory, ticket.booking_id) == BookingStatus.CANCELLED.value

"""
Tests for ticket check-in verification.
"""

import pytest
from httpx import AsyncClient


async def _book(client: AsyncClient, event_id: int) -> dict:
    response = await client.post(
        "/api/v1/bookings/",
        json={"event_id": event_id, "attendee_email": "ada@example.com", "attendee_name": "Ada"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_verify_confirmed_ticket(client: AsyncClient, test_event):
    ticket = await _book(client, test_event.id)

    response = await client.get(f"/api/v1/tickets/{ticket['ticket_code']}")
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    assert data["status"] == "confirmed"
    assert data["event_title"] == "PyCon Meetup"
    assert data["attendee_name"] == "Ada"


@pytest.mark.asyncio
async def test_verify_accepts_lowercase_code(client: AsyncClient, test_event):
    ticket = await _book(client, test_event.id)

    response = await client.get(f"/api/v1/tickets/{ticket['ticket_code'].lower()}")
    assert response.status_code == 200
    assert response.json()["ticket_code"] == ticket["ticket_code"]


@pytest.mark.asyncio
async def test_cancelled_ticket_is_invalid(client: AsyncClient, test_event, attendee_headers):
    ticket = await _book(client, test_event.id)
    await client.delete(
        f"/api/v1/bookings/{ticket['booking_id']}",
        headers=attendee_headers("ada@example.com"),
    )

    response = await client.get(f"/api/v1/tickets/{ticket['ticket_code']}")
    assert response.status_code == 200
    assert response.json()["valid"] is False
    assert response.json()["status"] == "cancelled"


@pytest.mark.asyncio
async def test_unknown_ticket(client: AsyncClient):
    response = await client.get("/api/v1/tickets/DE-00000000")
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "booking_not_found"

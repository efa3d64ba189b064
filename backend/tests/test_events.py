"""
Tests for event read endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, test_event, single_spot_event):
    response = await client.get("/api/v1/events/")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["page"] == 1
    assert data["cached"] is False
    assert {e["title"] for e in data["events"]} == {"PyCon Meetup", "Rust Workshop"}


@pytest.mark.asyncio
async def test_list_events_hides_past_by_default(client: AsyncClient, test_event, past_event):
    upcoming = await client.get("/api/v1/events/")
    assert [e["title"] for e in upcoming.json()["events"]] == ["PyCon Meetup"]

    everything = await client.get("/api/v1/events/", params={"upcoming_only": False})
    assert everything.json()["total"] == 2


@pytest.mark.asyncio
async def test_list_events_pagination(client: AsyncClient, create_event):
    for i in range(5):
        await create_event(f"Meetup {i}", capacity=10)

    response = await client.get("/api/v1/events/", params={"page": 2, "page_size": 2})
    data = response.json()
    assert data["total"] == 5
    assert len(data["events"]) == 2


@pytest.mark.asyncio
async def test_get_event(client: AsyncClient, test_event):
    response = await client.get(f"/api/v1/events/{test_event.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "PyCon Meetup"
    assert data["capacity"] == 100


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient):
    response = await client.get("/api/v1/events/99999")
    assert response.status_code == 404
    assert response.json()["detail"] == {"code": "event_not_found", "message": "Event not found"}


@pytest.mark.asyncio
async def test_event_capacity(client: AsyncClient, test_event):
    response = await client.get(f"/api/v1/events/{test_event.id}/capacity")
    assert response.status_code == 200
    assert response.json() == {
        "event_id": test_event.id,
        "capacity": 100,
        "booked": 0,
        "available": 100,
    }


@pytest.mark.asyncio
async def test_unlimited_event_capacity(client: AsyncClient, unlimited_event):
    response = await client.get(f"/api/v1/events/{unlimited_event.id}/capacity")
    data = response.json()
    assert data["capacity"] is None
    assert data["available"] is None


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["cache"]["status"] == "disabled"

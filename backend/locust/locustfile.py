"""
Locust Load Test Suite

Events are seeded ahead of time; pass the limited-capacity event through
LOCUST_EVENT_ID (the first upcoming event with a capacity is used otherwise).

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Distinct attendees race for one event
  locust -f locustfile.py --tags duplicate    # One attendee re-books the same event
  locust -f locustfile.py --tags throughput   # Cached listing
  locust -f locustfile.py                     # All tests

After a concurrency run, verify:
  SELECT COUNT(*) FROM bookings WHERE event_id = X AND status = 'confirmed';
Must be <= the event's capacity.
"""

import os
import random
import uuid

import requests
from locust import HttpUser, task, between, tag, events

EVENT_IDS = []
TARGET_EVENT_ID = int(os.environ["LOCUST_EVENT_ID"]) if os.environ.get("LOCUST_EVENT_ID") else None


def unique_email():
    return f"load_{uuid.uuid4().hex[:12]}@example.com"


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    global TARGET_EVENT_ID
    if TARGET_EVENT_ID is not None or not environment.host:
        return

    resp = requests.get(f"{environment.host}/api/v1/events/", params={"page_size": 100})
    for event in resp.json().get("events", []):
        EVENT_IDS.append(event["id"])
        if TARGET_EVENT_ID is None and event["capacity"]:
            TARGET_EVENT_ID = event["id"]
    print(f"\nTarget event: {TARGET_EVENT_ID}\n")


def _accept(resp, *codes):
    if resp.status_code in codes:
        resp.success()
    else:
        resp.failure(f"Unexpected: {resp.status_code}")


class ConcurrencyUser(HttpUser):
    """
    Every simulated user is a distinct attendee booking the same event.

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s
    """
    wait_time = between(0, 0.1)

    @tag("concurrency")
    @task
    def book_limited_event(self):
        if TARGET_EVENT_ID is None:
            return
        with self.client.post(
            "/api/v1/bookings/",
            json={"event_id": TARGET_EVENT_ID, "attendee_email": unique_email(), "attendee_name": "Load Tester"},
            catch_response=True,
        ) as resp:
            # 409 once the event is full
            _accept(resp, 201, 409)


class DuplicateUser(HttpUser):
    """
    One attendee per user, booking the same event over and over.
    At most one 201 per attendee; every retry must be a 409 duplicate_booking.

    Run: locust -f locustfile.py --tags duplicate -u 20 -r 20 --run-time 30s
    """
    wait_time = between(0, 0.2)

    def on_start(self):
        self.email = unique_email()
        self.booked = False

    @tag("duplicate")
    @task
    def rebook(self):
        if TARGET_EVENT_ID is None:
            return
        with self.client.post(
            "/api/v1/bookings/",
            json={"event_id": TARGET_EVENT_ID, "attendee_email": self.email, "attendee_name": "Repeat Booker"},
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                if self.booked:
                    resp.failure("Second confirmed booking for the same attendee")
                    return
                self.booked = True
                resp.success()
            elif resp.status_code == 409:
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    Cache effectiveness. Run once with Redis and once without, then compare
    latency percentiles.

    Run: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        page = random.randint(1, 5)
        self.client.get(f"/api/v1/events/?page={page}&page_size=20", name="/api/v1/events/ [cached]")

    @tag("throughput", "read")
    @task(3)
    def capacity(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}/capacity", name="/api/v1/events/{id}/capacity")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")

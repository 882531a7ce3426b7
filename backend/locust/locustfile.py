"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags reserve   # Contention on one event's sheets
  locust -f locustfile.py --tags browse    # Listing and event views
  locust -f locustfile.py                  # All tests

Expects at least one public event. Users are registered on start.
"""

import random
import string
from locust import HttpUser, task, between, tag

RANKS = ["S", "A", "B", "C"]


def random_login_name():
    return "load_" + "".join(random.choices(string.ascii_lowercase, k=10))


class TicketBuyer(HttpUser):
    """
    Registers, logs in, browses events and reserves/cancels sheets.

    After a run, verify no sheet is held twice:
      SELECT event_id, sheet_id, COUNT(*) FROM reservations
      WHERE canceled_at IS NULL GROUP BY event_id, sheet_id HAVING COUNT(*) > 1;
    Should return no rows.
    """
    wait_time = between(0, 0.5)

    def on_start(self):
        login_name = random_login_name()
        self.client.post("/api/users", json={
            "nickname": login_name,
            "login_name": login_name,
            "password": login_name,
        })
        resp = self.client.post("/api/actions/login", json={
            "login_name": login_name,
            "password": login_name,
        })
        self.user_id = resp.json().get("id") if resp.status_code == 200 else None
        self.held = []

    def _public_event_ids(self):
        resp = self.client.get("/api/events", name="/api/events")
        if resp.status_code != 200:
            return []
        return [event["id"] for event in resp.json()]

    @tag("browse")
    @task(5)
    def browse(self):
        event_ids = self._public_event_ids()
        if event_ids:
            self.client.get(f"/api/events/{random.choice(event_ids)}", name="/api/events/[id]")

    @tag("reserve")
    @task(3)
    def reserve(self):
        event_ids = self._public_event_ids()
        if not event_ids:
            return
        event_id = event_ids[0]
        with self.client.post(
            f"/api/events/{event_id}/actions/reserve",
            json={"sheet_rank": random.choice(RANKS)},
            name="/api/events/[id]/actions/reserve",
            catch_response=True,
        ) as resp:
            if resp.status_code == 202:
                data = resp.json()
                self.held.append((event_id, data["sheet_rank"], data["sheet_num"]))
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # sold_out is an expected outcome under contention
            else:
                resp.failure(f"unexpected {resp.status_code}")

    @tag("reserve")
    @task(1)
    def cancel(self):
        if not self.held:
            return
        event_id, rank, num = self.held.pop(random.randrange(len(self.held)))
        self.client.delete(
            f"/api/events/{event_id}/sheets/{rank}/{num}/reservation",
            name="/api/events/[id]/sheets/[rank]/[num]/reservation",
        )

    @tag("browse")
    @task(1)
    def my_page(self):
        if self.user_id:
            self.client.get(f"/api/users/{self.user_id}", name="/api/users/[id]")

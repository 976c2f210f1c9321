"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags door         # Concurrent scans at the door
  locust -f locustfile.py --tags public       # Public page cache + signups
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string
from locust import HttpUser, task, between, tag, events

# Shared state
PUBLIC_SLUGS = []
DOOR = {"event_id": None, "headers": None, "tickets": []}


def random_email():
    return f"load_{random.randint(10000, 99999)}@test.com"


def random_username():
    return "u_" + "".join(random.choices(string.ascii_lowercase, k=8))


def login_new_organizer(client):
    email = random_email()
    client.post("/api/v1/auth/register", json={
        "email": email,
        "username": random_username(),
        "password": "loadtest123",
    })
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": "loadtest123"})
    if resp.status_code != 200:
        return {}
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: door event and tickets are created by the first DoorUser")
    print("=" * 60)


class DoorUser(HttpUser):
    """
    TEST 1: Many scanners, same tickets.

    Run: locust -f locustfile.py --tags door -u 50 -r 25 --run-time 30s

    After test, every scanned ticket has exactly one checked_in_at:
      SELECT COUNT(*) FROM registrations WHERE checked_in AND checked_in_at IS NULL;
    Should be 0
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        if DOOR["event_id"]:
            return
        headers = login_new_organizer(self.client)
        resp = self.client.post("/api/v1/events/", json={"title": "Door Rush"}, headers=headers)
        if resp.status_code != 201:
            return
        event_id = resp.json()["id"]
        tickets = []
        for i in range(25):
            reg = self.client.post(
                f"/api/v1/events/{event_id}/registrations",
                json={"name": f"Guest {i}", "email": f"guest{i}@load.test"},
                name="/api/v1/events/{id}/registrations",
            )
            if reg.status_code == 201:
                tickets.append(reg.json()["registration"]["id"])
        DOOR.update(event_id=event_id, headers=headers, tickets=tickets)
        print(f"\n✓ Door event {event_id} with {len(tickets)} tickets\n")

    @tag("door")
    @task
    def scan_ticket(self):
        if not DOOR["tickets"]:
            return
        with self.client.post(
            f"/api/v1/events/{DOOR['event_id']}/scan",
            json={"code": random.choice(DOOR["tickets"])},
            headers=DOOR["headers"],
            name="/api/v1/events/{id}/scan",
            catch_response=True,
        ) as resp:
            if resp.status_code == 200 and resp.json()["status"] == "success":
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code} {resp.text[:80]}")


class PublicPageUser(HttpUser):
    """
    TEST 2: Public page throughput.

    Run twice, with and without Redis, and compare P95 on the slug lookup:
      locust -f locustfile.py --tags public -u 100 -r 20 --run-time 60s
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        if PUBLIC_SLUGS:
            return
        headers = login_new_organizer(self.client)
        for i in range(5):
            resp = self.client.post("/api/v1/events/", json={"title": f"Open Day {i}"}, headers=headers)
            if resp.status_code == 201:
                PUBLIC_SLUGS.append((resp.json()["slug"], resp.json()["id"]))

    @tag("public", "read")
    @task(10)
    def view_public_page(self):
        if PUBLIC_SLUGS:
            slug, _ = random.choice(PUBLIC_SLUGS)
            self.client.get(f"/api/v1/public/events/{slug}", name="/api/v1/public/events/{slug}")

    @tag("public")
    @task(3)
    def shared_link_visit(self):
        if PUBLIC_SLUGS:
            slug, _ = random.choice(PUBLIC_SLUGS)
            self.client.post(
                f"/api/v1/public/events/{slug}/visits",
                name="/api/v1/public/events/{slug}/visits",
            )

    @tag("public")
    @task(2)
    def register(self):
        if PUBLIC_SLUGS:
            _, event_id = random.choice(PUBLIC_SLUGS)
            self.client.post(
                f"/api/v1/events/{event_id}/registrations",
                json={"name": "Load Guest", "email": random_email()},
                name="/api/v1/events/{id}/registrations",
            )

    @tag("public")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Bad input. Nothing should 500.

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = login_new_organizer(self.client)
        resp = self.client.post("/api/v1/events/", json={"title": "Edge Cases"}, headers=self.headers)
        self.event_id = resp.json()["id"] if resp.status_code == 201 else "missing"

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def scan_garbage(self):
        with self.client.post(
            f"/api/v1/events/{self.event_id}/scan",
            json={"code": "".join(random.choices(string.printable, k=40))},
            headers=self.headers,
            name="/api/v1/events/{id}/scan [garbage]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 200 and resp.json()["status"] == "not_found":
                resp.success()
            else:
                resp.failure(f"Expected not_found, got {resp.status_code}")

    @tag("edge")
    @task
    def register_unknown_event(self):
        with self.client.post(
            "/api/v1/events/doesnotexist/registrations",
            json={"name": "Nobody", "email": random_email()},
            catch_response=True,
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def register_bad_email(self):
        with self.client.post(
            f"/api/v1/events/{self.event_id}/registrations",
            json={"name": "Bad", "email": "not-an-email"},
            name="/api/v1/events/{id}/registrations [bad email]",
            catch_response=True,
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/events/",
            data="not json at all",
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post("/api/v1/events/", json={"title": "Sneaky"}, catch_response=True) as resp:
            self._expect(resp, [401])


class RealisticUser(HttpUser):
    """
    TEST 4: Organizer mixed workload.

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = login_new_organizer(self.client)
        self.event_ids = []

    @task(20)
    def dashboard(self):
        self.client.get("/api/v1/events/?page=1&page_size=20", headers=self.headers)

    @task(10)
    def guest_list(self):
        if self.event_ids:
            self.client.get(
                f"/api/v1/events/{random.choice(self.event_ids)}/guests",
                headers=self.headers,
                name="/api/v1/events/{id}/guests",
            )

    @task(3)
    def export_csv(self):
        if self.event_ids:
            self.client.get(
                f"/api/v1/events/{random.choice(self.event_ids)}/guests.csv",
                headers=self.headers,
                name="/api/v1/events/{id}/guests.csv",
            )

    @task(2)
    def create_event(self):
        if self.headers:
            resp = self.client.post(
                "/api/v1/events/",
                json={"title": f"Event {random.randint(1, 10000)}"},
                headers=self.headers,
            )
            if resp.status_code == 201:
                self.event_ids.append(resp.json()["id"])

"""
Full organizer flow: create an event, publish it, take a registration and scan
the ticket at the door.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_event_lifecycle(client: AsyncClient, auth_headers, outbound):
    created = await client.post("/api/v1/events/", json={"title": "Summer Fest!!"}, headers=auth_headers)
    assert created.status_code == 201
    event = created.json()
    assert event["slug"] == "summer-fest"

    updated = await client.put(
        f"/api/v1/events/{event['id']}",
        json={
            "title": "Summer Fest!!",
            "description": "Music by the river",
            "venue_name": "Riverside Park",
            "event_date": "2026-06-05",
            "event_time": "19:30",
        },
        headers=auth_headers,
    )
    assert updated.status_code == 200

    page = await client.get("/api/v1/public/events/summer-fest")
    assert page.json()["venue_name"] == "Riverside Park"

    registered = await client.post(
        f"/api/v1/events/{event['id']}/registrations",
        json={"name": "Jane Doe", "email": "jane@x.com"},
    )
    assert registered.status_code == 201
    ticket_id = registered.json()["registration"]["id"]
    assert registered.json()["ticket_email"]["success"] is True
    assert len(outbound.to("api.resend.com")) == 1

    downloaded = await client.get(f"/api/v1/registrations/{ticket_id}/ticket.pdf")
    assert downloaded.status_code == 200

    scanned = await client.post(
        f"/api/v1/events/{event['id']}/scan",
        json={"code": ticket_id},
        headers=auth_headers,
    )
    assert scanned.json()["status"] == "success"
    assert scanned.json()["message"] == "Guest Jane Doe Verified!"

    listing = await client.get("/api/v1/events/", headers=auth_headers)
    [summary] = listing.json()["events"]
    assert summary["guest_count"] == 1
    assert summary["checked_in_count"] == 1

    verified = await client.get(f"/api/v1/events/{event['id']}/verified-guests", headers=auth_headers)
    assert [g["id"] for g in verified.json()] == [ticket_id]

    deleted = await client.delete(f"/api/v1/events/{event['id']}", headers=auth_headers)
    assert deleted.json()["registrations_deleted"] == 1
    assert (await client.get("/api/v1/public/events/summer-fest")).status_code == 404
    assert (await client.get(f"/api/v1/registrations/{ticket_id}/ticket.pdf")).status_code == 404

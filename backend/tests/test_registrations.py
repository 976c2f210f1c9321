"""
Tests for guest registration, shared-link visits, guest lists and ticket downloads.
"""

import base64
import json

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from evntos.models.registration import Registration


@pytest.mark.asyncio
async def test_register_guest_mails_ticket(client: AsyncClient, test_event, outbound):
    response = await client.post(
        f"/api/v1/events/{test_event.id}/registrations",
        json={"name": "Jane Doe", "email": "jane@x.com", "contact_number": "555-0100"},
    )
    assert response.status_code == 201
    data = response.json()
    registration = data["registration"]
    assert registration["event_id"] == test_event.id
    assert registration["name"] == "Jane Doe"
    assert registration["source"] == "form"
    assert registration["checked_in"] is False
    assert registration["checked_in_at"] is None

    assert data["ticket_email"] == {
        "success": True,
        "message": "Ticket email sent successfully.",
        "email_id": "email_123",
    }

    [sent] = outbound.to("api.resend.com")
    assert sent.headers["authorization"] == "Bearer re_test_key"
    payload = json.loads(sent.content)
    assert payload["to"] == ["jane@x.com"]
    assert payload["subject"] == "Your Ticket for Test Concert"
    [attachment] = payload["attachments"]
    assert attachment["filename"] == "Test_Concert-Ticket-Jane_Doe.pdf"
    assert base64.b64decode(attachment["content"]).startswith(b"%PDF")


@pytest.mark.asyncio
async def test_registration_survives_email_failure(client: AsyncClient, test_event, outbound, db_session):
    outbound.handler = lambda request: httpx.Response(
        403, json={"name": "validation_error", "message": "Domain is not verified."}
    )
    response = await client.post(
        f"/api/v1/events/{test_event.id}/registrations",
        json={"name": "Jane Doe", "email": "jane@x.com"},
    )
    assert response.status_code == 201
    email = response.json()["ticket_email"]
    assert email["success"] is False
    assert "Domain is not verified." in email["message"]

    stored = await db_session.get(Registration, response.json()["registration"]["id"])
    assert stored is not None


@pytest.mark.asyncio
async def test_registration_without_email_provider(client: AsyncClient, test_event, integrations):
    integrations.mailer.api_key = None
    response = await client.post(
        f"/api/v1/events/{test_event.id}/registrations",
        json={"name": "Jane Doe", "email": "jane@x.com"},
    )
    assert response.status_code == 201
    assert response.json()["ticket_email"] == {
        "success": False,
        "message": "Email sending is not configured on the server.",
        "email_id": None,
    }


@pytest.mark.asyncio
async def test_same_email_may_register_twice(client: AsyncClient, test_event):
    ids = set()
    for _ in range(2):
        response = await client.post(
            f"/api/v1/events/{test_event.id}/registrations",
            json={"name": "Jane Doe", "email": "jane@x.com"},
        )
        assert response.status_code == 201
        ids.add(response.json()["registration"]["id"])
    assert len(ids) == 2


@pytest.mark.asyncio
async def test_register_for_closed_event(client: AsyncClient, test_event, db_session):
    test_event.registration_open = False
    await db_session.commit()
    response = await client.post(
        f"/api/v1/events/{test_event.id}/registrations",
        json={"name": "Late Comer", "email": "late@x.com"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_register_for_unknown_event(client: AsyncClient):
    response = await client.post(
        "/api/v1/events/nope/registrations",
        json={"name": "Lost", "email": "lost@x.com"},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_register_requires_valid_email(client: AsyncClient, test_event):
    response = await client.post(
        f"/api/v1/events/{test_event.id}/registrations",
        json={"name": "No Mail", "email": "not-an-email"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_public_event_page(client: AsyncClient, test_event):
    response = await client.get("/api/v1/public/events/test-concert")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == test_event.id
    assert data["venue_name"] == "Test Venue"
    assert "user_id" not in data


@pytest.mark.asyncio
async def test_public_event_unknown_slug(client: AsyncClient):
    response = await client.get("/api/v1/public/events/missing")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_shared_link_visits_stay_off_guest_lists(
    client: AsyncClient, auth_headers, test_event, guest, db_session
):
    response = await client.post("/api/v1/public/events/test-concert/visits")
    assert response.status_code == 201
    visit_id = response.json()["registration_id"]
    assert response.json()["event_id"] == test_event.id

    visit = await db_session.get(Registration, visit_id)
    assert visit.source == "shared_link"

    guests = await client.get(f"/api/v1/events/{test_event.id}/guests", headers=auth_headers)
    assert [g["id"] for g in guests.json()] == [guest.id]

    # A visit id is not a ticket
    pdf = await client.get(f"/api/v1/registrations/{visit_id}/ticket.pdf")
    assert pdf.status_code == 404


@pytest.mark.asyncio
async def test_guest_list_newest_first(client: AsyncClient, auth_headers, test_event):
    for name in ["Early Bird", "Night Owl"]:
        await client.post(
            f"/api/v1/events/{test_event.id}/registrations",
            json={"name": name, "email": "someone@x.com"},
        )
    response = await client.get(f"/api/v1/events/{test_event.id}/guests", headers=auth_headers)
    assert [g["name"] for g in response.json()] == ["Night Owl", "Early Bird"]


@pytest.mark.asyncio
async def test_guest_list_csv_download(client: AsyncClient, auth_headers, test_event, guest):
    response = await client.get(f"/api/v1/events/{test_event.id}/guests.csv", headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="test-concert-guest-list.csv"' in response.headers["content-disposition"]
    lines = response.text.splitlines()
    assert lines[0] == "Name,Email,Contact Number,Registered At"
    assert lines[1].startswith('"Ada Lovelace","ada@example.com","+44 20 7946 0000",')


@pytest.mark.asyncio
async def test_download_ticket(client: AsyncClient, guest):
    response = await client.get(f"/api/v1/registrations/{guest.id}/ticket.pdf")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "Test_Concert-Ticket-Ada_Lovelace.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_download_ticket_unknown(client: AsyncClient):
    response = await client.get("/api/v1/registrations/unknown/ticket.pdf")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_registration_rows_are_form_rows(client: AsyncClient, test_event, db_session):
    await client.post(
        f"/api/v1/events/{test_event.id}/registrations",
        json={"name": "  Padded Name  ", "email": "pad@x.com", "contact_number": "   "},
    )
    rows = (await db_session.execute(select(Registration))).scalars().all()
    assert [(r.name, r.contact_number, r.source) for r in rows] == [("Padded Name", None, "form")]

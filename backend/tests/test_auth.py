"""
Tests for organizer accounts: sign-up, login, profile and the admin flag.
"""

import json

import httpx
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_organizer(client: AsyncClient, outbound):
    """Sign-up returns the profile and mails a welcome message."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "Organizer@Example.com",
        "username": "organizer",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "organizer@example.com"
    assert data["username"] == "organizer"
    assert data["is_admin"] is False
    assert "hashed_password" not in data

    sent = outbound.to("api.resend.com")
    assert len(sent) == 1
    payload = json.loads(sent[0].content)
    assert payload["to"] == ["organizer@example.com"]
    assert payload["subject"] == "Welcome to Evntos!"
    assert "organizer" in payload["html"]


@pytest.mark.asyncio
async def test_register_succeeds_when_welcome_email_fails(client: AsyncClient, outbound):
    outbound.handler = lambda request: httpx.Response(
        422, json={"name": "validation_error", "message": "Invalid `from` field."}
    )
    response = await client.post("/api/v1/auth/register", json={
        "email": "bounce@example.com",
        "username": "bouncer",
        "password": "securepassword123",
    })
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user):
    """Email uniqueness ignores case."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "TEST@example.com",
        "username": "different",
        "password": "securepassword123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_duplicate_username(client: AsyncClient, test_user):
    response = await client.post("/api/v1/auth/register", json={
        "email": "different@example.com",
        "username": "testuser",
        "password": "securepassword123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "email": "weak@example.com",
        "username": "weakuser",
        "password": "short",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_returns_bearer_token(client: AsyncClient, test_user):
    response = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["access_token"]
    assert data["token_type"] == "bearer"

    me = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {data['access_token']}"},
    )
    assert me.status_code == 200
    assert me.json()["email"] == "test@example.com"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    response = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient):
    response = await client.post("/api/v1/auth/login", json={
        "email": "nobody@example.com",
        "password": "anypassword123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_flags_admin(client: AsyncClient, admin_headers, auth_headers):
    admin = await client.get("/api/v1/auth/me", headers=admin_headers)
    assert admin.json()["is_admin"] is True

    regular = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert regular.json()["is_admin"] is False

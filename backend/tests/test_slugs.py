"""
Tests for slug generation: local normalization, the remote model and uniqueness.
"""

import json
import re

import httpx
import pytest

from evntos.infrastructure.slug_ai import GeminiSlugClient, SlugGenerationError
from evntos.models.event import Event
from evntos.services.slug_service import (
    ensure_unique_slug,
    fallback_slug,
    generate_slug,
    normalize_slug,
)

SLUG_SHAPE = re.compile(r"^[a-z0-9-]{1,50}$")


def _gemini(handler) -> GeminiSlugClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiSlugClient(
        http,
        api_key="g_test_key",
        model="gemini-test",
        base_url="https://generativelanguage.googleapis.com/v1beta",
    )


def _answer(text: str):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})
    return handler


@pytest.mark.parametrize("title,expected", [
    ("Summer Fest!!", "summer-fest"),
    ("  Python   Meetup  #42 ", "python-meetup-42"),
    ("Rock & Roll", "rock-roll"),
    ("--already-a-slug--", "already-a-slug"),
    ("CAPS LOCK DAY", "caps-lock-day"),
])
def test_fallback_slug(title, expected):
    assert fallback_slug(title) == expected


@pytest.mark.parametrize("title", ["", "!!!", "   ", "日本語"])
def test_fallback_slug_never_empty(title):
    assert fallback_slug(title) == "event"


def test_long_titles_are_capped_without_trailing_hyphen():
    slug = fallback_slug("word " * 40)
    assert SLUG_SHAPE.match(slug)
    assert not slug.endswith("-")


def test_normalize_model_answer():
    assert normalize_slug("  `Jazz-Night-2026`\n") == "jazz-night-2026"


@pytest.mark.asyncio
async def test_remote_slug_is_normalized():
    client = _gemini(_answer("Jazz Night 2026!\n"))
    assert await generate_slug("Jazz Night", client) == "jazz-night-2026"
    await client.http.aclose()


@pytest.mark.asyncio
async def test_remote_request_shape():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _answer("jazz-night")(request)

    client = _gemini(handler)
    await client.suggest_slug("Jazz Night")
    await client.http.aclose()

    [request] = seen
    assert request.url.path == "/v1beta/models/gemini-test:generateContent"
    assert request.url.params["key"] == "g_test_key"
    prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
    assert "Title: Jazz Night" in prompt


@pytest.mark.asyncio
async def test_remote_failure_falls_back():
    client = _gemini(lambda request: httpx.Response(503, json={"error": "overloaded"}))
    with pytest.raises(SlugGenerationError):
        await client.suggest_slug("Jazz Night")
    assert await generate_slug("Jazz Night", client) == "jazz-night"
    await client.http.aclose()


@pytest.mark.asyncio
async def test_malformed_remote_answer_falls_back():
    client = _gemini(lambda request: httpx.Response(200, json={"candidates": []}))
    assert await generate_slug("Jazz Night", client) == "jazz-night"
    await client.http.aclose()


@pytest.mark.asyncio
async def test_unusable_remote_answer_falls_back():
    client = _gemini(_answer("!!!"))
    assert await generate_slug("Jazz Night", client) == "jazz-night"
    await client.http.aclose()


@pytest.mark.asyncio
async def test_no_client_uses_fallback():
    assert await generate_slug("Jazz Night", None) == "jazz-night"


@pytest.mark.asyncio
async def test_ensure_unique_slug(db_session, test_user):
    db_session.add_all([
        Event(user_id=test_user.id, title="Jazz", slug="jazz"),
        Event(user_id=test_user.id, title="Jazz", slug="jazz-2"),
        Event(user_id=test_user.id, title="Jazz Brunch", slug="jazz-brunch"),
    ])
    await db_session.commit()

    assert await ensure_unique_slug(db_session, "jazz") == "jazz-3"
    assert await ensure_unique_slug(db_session, "blues") == "blues"


@pytest.mark.asyncio
async def test_ensure_unique_slug_ignores_own_event(db_session, test_event):
    assert await ensure_unique_slug(db_session, "test-concert", exclude_event_id=test_event.id) == "test-concert"
    assert await ensure_unique_slug(db_session, "test-concert") == "test-concert-2"


@pytest.mark.asyncio
async def test_suffixed_slug_stays_within_limit(db_session, test_user):
    base = "a" * 50
    db_session.add(Event(user_id=test_user.id, title="Long", slug=base))
    await db_session.commit()

    slug = await ensure_unique_slug(db_session, base)
    assert slug == "a" * 48 + "-2"
    assert SLUG_SHAPE.match(slug)

"""
Pytest fixtures for test database, client, authentication and outbound
integrations.

Tables are created and dropped around every test. The app's get_db
dependency is overridden with the test session, and get_integrations with
clients whose HTTP traffic goes to an httpx.MockTransport.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from evntos.main import app
from evntos.api.deps import get_integrations
from evntos.core.config import get_settings
from evntos.core.security import create_access_token, hash_password
from evntos.db.base import Base
from evntos.db.session import get_db
from evntos.infrastructure import Integrations, build_integrations
from evntos.models.event import Event
from evntos.models.registration import Registration
from evntos.models.user import User

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///./evntos_test.db")

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


class RecordingTransport:
    """Collects outbound requests and answers them with a configurable handler."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"id": "email_123"})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def outbound() -> RecordingTransport:
    return RecordingTransport()


@pytest_asyncio.fixture
async def integrations(outbound: RecordingTransport) -> AsyncGenerator[Integrations, None]:
    """Email configured, slug model and image host not configured."""
    settings = get_settings().model_copy(update={
        "RESEND_API_KEY": "re_test_key",
        "GEMINI_API_KEY": None,
        "IMAGEKIT_PUBLIC_KEY": None,
        "IMAGEKIT_PRIVATE_KEY": None,
        "IMAGEKIT_URL_ENDPOINT": None,
    })
    built = build_integrations(settings, transport=httpx.MockTransport(outbound))
    yield built
    await built.aclose()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    integrations: Integrations,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the DB and integrations dependencies overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_integrations] = lambda: integrations

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(db: AsyncSession, email: str, username: str) -> User:
    user = User(
        email=email,
        username=username,
        hashed_password=hash_password("testpassword123"),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': str(user.id)})}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "test@example.com", "testuser")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "other@example.com", "otheruser")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, get_settings().ADMIN_EMAIL, "admin")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    return _headers_for(test_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    return _headers_for(other_user)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict:
    return _headers_for(admin_user)


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, test_user: User) -> Event:
    event = Event(
        user_id=test_user.id,
        title="Test Concert",
        description="A test event",
        image_url="",
        slug="test-concert",
        venue_name="Test Venue",
        venue_address="1 Main St",
        map_link="",
        event_date="2026-12-05",
        event_time="19:30",
        registration_open=True,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def other_event(db_session: AsyncSession, other_user: User) -> Event:
    event = Event(
        user_id=other_user.id,
        title="Someone Else's Party",
        slug="someone-elses-party",
        registration_open=True,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def guest(db_session: AsyncSession, test_event: Event) -> Registration:
    registration = Registration(
        event_id=test_event.id,
        name="Ada Lovelace",
        email="ada@example.com",
        contact_number="+44 20 7946 0000",
        source="form",
    )
    db_session.add(registration)
    await db_session.commit()
    await db_session.refresh(registration)
    return registration

"""
Event service: create, read, overwrite and delete organizer events.

Ownership is checked here, next to the store, rather than in the HTTP layer:
only the owner (or the configured admin account) may change, delete, list
guests of, or scan tickets for an event.
"""

from typing import Optional
from urllib.parse import quote

from sqlalchemy import select, func, delete, case
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from evntos.core.logging import get_logger
from evntos.core.security import is_admin_email
from evntos.infrastructure.slug_ai import GeminiSlugClient
from evntos.models.event import Event
from evntos.models.registration import Registration, SOURCE_FORM
from evntos.models.user import User
from evntos.schemas.event import EventUpdate
from evntos.services.slug_service import generate_slug, ensure_unique_slug

logger = get_logger(__name__)

PLACEHOLDER_IMAGE_URL = "https://placehold.co/600x400.png?text={title}"


def placeholder_image_url(title: str) -> str:
    return PLACEHOLDER_IMAGE_URL.format(title=quote(title, safe=""))


def can_manage(event: Event, user: User) -> bool:
    return event.user_id == user.id or is_admin_email(user.email)


async def add_event(
    db: AsyncSession,
    title: str,
    owner: User,
    slug_client: Optional[GeminiSlugClient] = None,
) -> Event:
    """Create an event from a title; every other field starts empty and open."""
    base_slug = await generate_slug(title, slug_client)
    slug = await ensure_unique_slug(db, base_slug)

    event = Event(
        user_id=owner.id,
        title=title,
        description="",
        image_url=placeholder_image_url(title),
        slug=slug,
        venue_name="",
        venue_address="",
        map_link="",
        event_date="",
        event_time="",
        registration_open=True,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, slug=event.slug, owner_id=owner.id)
    return event


async def get_event_by_id(db: AsyncSession, event_id: str) -> Optional[Event]:
    result = await db.execute(select(Event).where(Event.id == event_id))
    return result.scalar_one_or_none()


async def get_event_by_slug(db: AsyncSession, slug: str) -> Optional[Event]:
    """First match by creation time, so older events win any slug collision."""
    result = await db.execute(
        select(Event)
        .where(Event.slug == slug)
        .order_by(Event.created_at.asc(), Event.id.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_event(db: AsyncSession, event_id: str) -> Event:
    """Get a single event by ID or raise 404."""
    event = await get_event_by_id(db, event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {event_id} not found",
        )
    return event


async def get_managed_event(db: AsyncSession, event_id: str, user: User) -> Event:
    """Get an event the caller is allowed to manage. 404 if absent, 403 if not theirs."""
    event = await get_event(db, event_id)
    if not can_manage(event, user):
        logger.warning("event_access_denied", event_id=event_id, user_id=user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not allowed to manage this event",
        )
    return event


async def update_event(
    db: AsyncSession,
    event_id: str,
    data: EventUpdate,
    user: User,
    slug_client: Optional[GeminiSlugClient] = None,
) -> tuple[Event, str]:
    """
    Overwrite every mutable field of an event.
    The slug is regenerated only when the title changed; the previous slug is
    returned alongside the event so callers can drop its cached page.
    """
    event = await get_managed_event(db, event_id, user)
    old_slug = event.slug

    if data.title != event.title:
        base_slug = await generate_slug(data.title, slug_client)
        event.slug = await ensure_unique_slug(db, base_slug, exclude_event_id=event.id)

    event.title = data.title
    event.description = data.description
    event.image_url = data.image_url
    event.venue_name = data.venue_name
    event.venue_address = data.venue_address
    event.map_link = data.map_link
    event.event_date = data.event_date
    event.event_time = data.event_time
    event.registration_open = data.registration_open

    await db.flush()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, slug=event.slug, slug_changed=old_slug != event.slug)
    return event, old_slug


async def delete_event(db: AsyncSession, event_id: str, user: User) -> tuple[Event, int]:
    """
    Delete an event and every registration that references it.
    Both deletes run in the request transaction, so either both land or neither does.
    """
    event = await get_managed_event(db, event_id, user)

    result = await db.execute(
        delete(Registration).where(Registration.event_id == event.id)
    )
    registrations_deleted = result.rowcount or 0
    await db.delete(event)
    await db.flush()

    logger.info(
        "event_deleted",
        event_id=event.id,
        user_id=user.id,
        registrations_deleted=registrations_deleted,
    )
    return event, registrations_deleted


async def list_user_events(
    db: AsyncSession,
    owner: User,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[tuple[Event, int, int]], int]:
    """
    Dashboard listing: the owner's events, newest first, each with its number
    of form registrations and how many of those have checked in.
    """
    total = (
        await db.execute(select(func.count(Event.id)).where(Event.user_id == owner.id))
    ).scalar()

    guest_counts = (
        select(
            Registration.event_id.label("event_id"),
            func.count(Registration.id).label("guests"),
            func.sum(case((Registration.checked_in.is_(True), 1), else_=0)).label("checked_in"),
        )
        .where(Registration.source == SOURCE_FORM)
        .group_by(Registration.event_id)
        .subquery()
    )
    query = (
        select(Event, guest_counts.c.guests, guest_counts.c.checked_in)
        .outerjoin(guest_counts, guest_counts.c.event_id == Event.id)
        .where(Event.user_id == owner.id)
        .order_by(Event.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    rows = (await db.execute(query)).all()
    return [(event, guests or 0, checked_in or 0) for event, guests, checked_in in rows], total

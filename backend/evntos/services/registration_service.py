"""
Registration service: guest signups, shared-link visit tracking, guest lists.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from evntos.core.logging import get_logger
from evntos.core.metrics import record_registration
from evntos.models.event import Event
from evntos.models.registration import Registration, SOURCE_FORM, SOURCE_SHARED_LINK
from evntos.schemas.registration import RegistrationCreate
from evntos.services.event_service import get_event

logger = get_logger(__name__)


async def add_registration(
    db: AsyncSession,
    event_id: str,
    data: RegistrationCreate,
) -> tuple[Registration, Event]:
    """
    Register a guest through the public form.
    The same email may register more than once for the same event.
    """
    event = await get_event(db, event_id)
    if not event.registration_open:
        logger.info("registration_rejected", event_id=event_id, reason="closed")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Registration for this event is closed",
        )

    contact_number = (data.contact_number or "").strip() or None
    registration = Registration(
        event_id=event.id,
        name=data.name.strip(),
        email=data.email,
        contact_number=contact_number,
        source=SOURCE_FORM,
        checked_in=False,
    )
    db.add(registration)
    await db.flush()
    await db.refresh(registration)

    record_registration(SOURCE_FORM)
    logger.info("registration_created", registration_id=registration.id, event_id=event.id)
    return registration, event


async def record_shared_link_visit(db: AsyncSession, event: Event) -> Registration:
    """Store an anonymous visit record for a shared event link."""
    visit = Registration(
        event_id=event.id,
        name="",
        email="",
        source=SOURCE_SHARED_LINK,
        checked_in=False,
    )
    db.add(visit)
    await db.flush()
    await db.refresh(visit)

    record_registration(SOURCE_SHARED_LINK)
    logger.info("shared_link_visit", event_id=event.id, registration_id=visit.id)
    return visit


async def get_registration(db: AsyncSession, registration_id: str) -> Optional[Registration]:
    """Direct store lookup by id (the ticket number)."""
    result = await db.execute(select(Registration).where(Registration.id == registration_id))
    return result.scalar_one_or_none()


async def get_registrations_by_event_id(db: AsyncSession, event_id: str) -> list[Registration]:
    """Guest list: form registrations only, newest first."""
    result = await db.execute(
        select(Registration)
        .where(Registration.event_id == event_id, Registration.source == SOURCE_FORM)
        .order_by(Registration.registered_at.desc())
    )
    return list(result.scalars().all())


async def get_verified_registrations(db: AsyncSession, event_id: str) -> list[Registration]:
    """Checked-in guests, most recent entry first."""
    result = await db.execute(
        select(Registration)
        .where(
            Registration.event_id == event_id,
            Registration.source == SOURCE_FORM,
            Registration.checked_in.is_(True),
        )
        .order_by(Registration.checked_in_at.desc())
    )
    return list(result.scalars().all())

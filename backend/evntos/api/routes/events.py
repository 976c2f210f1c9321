"""
Organizer event endpoints: CRUD, guest lists, CSV export and door scanning.
Everything here requires authentication; per-event routes require ownership.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from evntos.api.deps import get_current_user, get_integrations
from evntos.db.session import get_db
from evntos.infrastructure import Integrations
from evntos.models.user import User
from evntos.schemas.event import (
    EventCreate, EventUpdate, EventResponse, EventSummary,
    EventListResponse, EventDeleteResponse,
)
from evntos.schemas.registration import RegistrationResponse, ScanRequest, ScanResponse
from evntos.services import event_service, registration_service, scan_service
from evntos.services.cache_service import invalidate_public_event
from evntos.services.export_service import guest_list_csv, guest_list_filename

router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    integrations: Integrations = Depends(get_integrations),
):
    """Create an event from a title. The public slug is generated for you."""
    return await event_service.add_event(db, event_data.title, user, integrations.slugs)


@router.get("/", response_model=EventListResponse)
async def list_my_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's events, newest first, with guest and check-in counts."""
    rows, total = await event_service.list_user_events(db, user, page, page_size)
    events = [
        EventSummary(
            **EventResponse.model_validate(event).model_dump(),
            guest_count=guests,
            checked_in_count=checked_in,
        )
        for event, guests, checked_in in rows
    ]
    return EventListResponse(events=events, total=total, page=page, page_size=page_size)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await event_service.get_managed_event(db, event_id, user)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: str,
    event_data: EventUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    integrations: Integrations = Depends(get_integrations),
):
    """Overwrite the event. Changing the title regenerates the slug."""
    event, old_slug = await event_service.update_event(
        db, event_id, event_data, user, integrations.slugs
    )
    response = EventResponse.model_validate(event)

    # Cached pages are dropped only once the change is committed
    await db.commit()
    await invalidate_public_event(old_slug, response.slug)
    return response


@router.delete("/{event_id}", response_model=EventDeleteResponse)
async def delete_event_endpoint(
    event_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete the event together with all of its registrations."""
    event, deleted = await event_service.delete_event(db, event_id, user)
    response = EventDeleteResponse(
        message=f'"{event.title}" and its registrations have been removed.',
        event_id=event.id,
        registrations_deleted=deleted,
        title=event.title,
    )
    slug = event.slug

    await db.commit()
    await invalidate_public_event(slug)
    return response


@router.get("/{event_id}/guests", response_model=list[RegistrationResponse])
async def list_guests_endpoint(
    event_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await event_service.get_managed_event(db, event_id, user)
    return await registration_service.get_registrations_by_event_id(db, event_id)


@router.get("/{event_id}/guests.csv")
async def export_guests_endpoint(
    event_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    event = await event_service.get_managed_event(db, event_id, user)
    registrations = await registration_service.get_registrations_by_event_id(db, event_id)
    return _csv_response(guest_list_csv(registrations), guest_list_filename(event))


@router.get("/{event_id}/verified-guests", response_model=list[RegistrationResponse])
async def list_verified_guests_endpoint(
    event_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await event_service.get_managed_event(db, event_id, user)
    return await registration_service.get_verified_registrations(db, event_id)


@router.get("/{event_id}/verified-guests.csv")
async def export_verified_guests_endpoint(
    event_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    event = await event_service.get_managed_event(db, event_id, user)
    registrations = await registration_service.get_verified_registrations(db, event_id)
    return _csv_response(
        guest_list_csv(registrations, verified=True),
        guest_list_filename(event, verified=True),
    )


@router.post("/{event_id}/scan", response_model=ScanResponse)
async def scan_ticket_endpoint(
    event_id: str,
    scan: ScanRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Verify a decoded QR payload against this event and check the guest in.
    Always 200 once the caller is authorized; the outcome is in `status`.
    """
    await event_service.get_managed_event(db, event_id, user)
    return await scan_service.verify_ticket(db, scan.code, event_id)


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

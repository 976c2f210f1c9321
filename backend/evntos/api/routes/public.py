"""
Anonymous endpoints behind the shareable event page.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from evntos.db.session import get_db
from evntos.schemas.event import PublicEventResponse
from evntos.schemas.registration import VisitRecordedResponse
from evntos.services import event_service, registration_service
from evntos.services.cache_service import get_cached_public_event, set_cached_public_event
from evntos.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/public/events", tags=["Public"])


async def _event_for_slug(db: AsyncSession, slug: str):
    event = await event_service.get_event_by_slug(db, slug)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event '{slug}' not found",
        )
    return event


@router.get("/{slug}", response_model=PublicEventResponse)
async def get_public_event_endpoint(slug: str, db: AsyncSession = Depends(get_db)):
    """
    Public event page data.
    Cached in Redis per slug; the cache is dropped when the event changes.
    """
    cached = await get_cached_public_event(slug)
    if cached:
        logger.info("public_event_cache_hit", slug=slug)
        return PublicEventResponse(**cached)

    event = await _event_for_slug(db, slug)
    response = PublicEventResponse.model_validate(event)
    await set_cached_public_event(slug, response.model_dump())
    return response


@router.post(
    "/{slug}/visits",
    response_model=VisitRecordedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_visit_endpoint(slug: str, db: AsyncSession = Depends(get_db)):
    """Track a visit that arrived through a shared link. Never shows up on guest lists."""
    event = await _event_for_slug(db, slug)
    visit = await registration_service.record_shared_link_visit(db, event)
    return VisitRecordedResponse(event_id=event.id, registration_id=visit.id)

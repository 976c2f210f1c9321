"""
Guest registration and ticket download.

Registration is anonymous (it is the public form). A successful registration
mails the PDF ticket; the outcome of that email is reported alongside the
new registration instead of failing the request.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from evntos.api.deps import get_integrations
from evntos.db.session import get_db
from evntos.infrastructure import Integrations
from evntos.models.registration import SOURCE_FORM
from evntos.schemas.registration import (
    RegistrationCreate, RegistrationResponse, RegistrationCreatedResponse,
)
from evntos.services import event_service, registration_service
from evntos.services.notification_service import send_ticket_email
from evntos.services.ticket_service import render_ticket_pdf, ticket_filename

router = APIRouter(tags=["Registrations"])


@router.post(
    "/events/{event_id}/registrations",
    response_model=RegistrationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_guest_endpoint(
    event_id: str,
    data: RegistrationCreate,
    db: AsyncSession = Depends(get_db),
    integrations: Integrations = Depends(get_integrations),
):
    registration, event = await registration_service.add_registration(db, event_id, data)
    email_result = await send_ticket_email(
        integrations.mailer, integrations.settings, event, registration
    )
    return RegistrationCreatedResponse(
        registration=RegistrationResponse.model_validate(registration),
        ticket_email=email_result,
    )


@router.get("/registrations/{registration_id}/ticket.pdf")
async def download_ticket_endpoint(registration_id: str, db: AsyncSession = Depends(get_db)):
    """The same PDF that is emailed. Knowing the ticket id is what grants access."""
    registration = await registration_service.get_registration(db, registration_id)
    if registration is None or registration.source != SOURCE_FORM:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found",
        )
    event = await event_service.get_event(db, registration.event_id)
    return Response(
        content=render_ticket_pdf(event, registration),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{ticket_filename(event, registration)}"'
        },
    )

"""
Ticket verification at the door.

A scanned QR code carries nothing but a registration id. Verification is a
function of (scanned text, target event id, store state) with four outcomes:

  success    - registration exists and belongs to the target event;
               it is checked in
  error      - registration exists but belongs to another event
  not_found  - no registration with that id (any string, of any length)
  error      - the lookup raised (store or otherwise)

Only `success` mutates anything.

Repeat scans: the first successful scan sets `checked_in_at`. Scanning the
same ticket again still succeeds (the guest is let through), but the original
entry time is kept and the response is flagged `already_checked_in` so the
door staff can spot a re-entry or a copied ticket.
"""

import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from evntos.core.logging import get_logger
from evntos.core.metrics import record_scan, ticket_scan_latency
from evntos.db.base import utcnow
from evntos.models.registration import SOURCE_FORM
from evntos.schemas.registration import RegistrationResponse, ScanResponse
from evntos.services import registration_service

logger = get_logger(__name__)

TICKET_ID_LENGTH = 32

MSG_DIFFERENT_EVENT = "Ticket is for a different event."
MSG_NOT_FOUND = "Invalid Ticket: Guest not found."
MSG_SYSTEM_ERROR = "Could not verify the ticket due to a system error. Please try again."


async def verify_ticket(db: AsyncSession, scanned_text: str, event_id: str) -> ScanResponse:
    start = time.perf_counter()
    try:
        result = await _verify(db, scanned_text.strip(), event_id)
    except SQLAlchemyError as e:
        logger.error("ticket_scan_failed", event_id=event_id, error=str(e))
        await db.rollback()
        result = ScanResponse(status="error", message=MSG_SYSTEM_ERROR)
    except Exception:
        logger.exception("ticket_scan_failed", event_id=event_id)
        await db.rollback()
        result = ScanResponse(status="error", message=MSG_SYSTEM_ERROR)
    finally:
        ticket_scan_latency.observe(time.perf_counter() - start)

    record_scan(result.status)
    return result


async def _verify(db: AsyncSession, code: str, event_id: str) -> ScanResponse:
    registration = None
    # Ticket ids are 32-char hex; anything longer cannot be one
    if code and len(code) <= TICKET_ID_LENGTH:
        registration = await registration_service.get_registration(db, code)

    # Shared-link visit rows are not tickets
    if registration is None or registration.source != SOURCE_FORM:
        logger.info("ticket_not_found", event_id=event_id)
        return ScanResponse(status="not_found", message=MSG_NOT_FOUND)

    if registration.event_id != event_id:
        logger.warning(
            "ticket_wrong_event",
            event_id=event_id,
            ticket_event_id=registration.event_id,
            registration_id=registration.id,
        )
        return ScanResponse(status="error", message=MSG_DIFFERENT_EVENT)

    already_checked_in = bool(registration.checked_in)
    if not already_checked_in:
        registration.checked_in = True
        registration.checked_in_at = utcnow()
        await db.flush()
        await db.refresh(registration)

    logger.info(
        "ticket_verified",
        event_id=event_id,
        registration_id=registration.id,
        already_checked_in=already_checked_in,
    )
    message = f"Guest {registration.name} Verified!"
    if already_checked_in:
        message = f"Guest {registration.name} was already checked in."
    return ScanResponse(
        status="success",
        message=message,
        registration=RegistrationResponse.model_validate(registration),
        already_checked_in=already_checked_in,
    )

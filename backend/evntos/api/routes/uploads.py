"""
Event image uploads, forwarded to ImageKit.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from evntos.api.deps import get_current_user, get_integrations
from evntos.core.logging import get_logger
from evntos.core.metrics import record_upload
from evntos.infrastructure import (
    Integrations,
    ImageHostError,
    ImageHostNotConfiguredError,
)
from evntos.models.user import User

logger = get_logger(__name__)
router = APIRouter(prefix="/uploads", tags=["Uploads"])


@router.post("/")
async def upload_image_endpoint(
    file: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    integrations: Integrations = Depends(get_integrations),
):
    """Upload one file; the image host's JSON (including `url`) is returned as is."""
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided.")

    content = await file.read()
    try:
        result = await integrations.images.upload(
            file.filename or "upload", content, file.content_type
        )
    except ImageHostNotConfiguredError as e:
        logger.error("upload_not_configured")
        record_upload(success=False)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except ImageHostError as e:
        logger.error("upload_failed", filename=file.filename, error=str(e))
        record_upload(success=False)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    record_upload(success=True)
    logger.info("upload_completed", user_id=user.id, filename=file.filename, size=len(content))
    return result


@router.get("/auth")
async def upload_auth_endpoint(
    user: User = Depends(get_current_user),
    integrations: Integrations = Depends(get_integrations),
):
    """Signed one-time parameters for direct browser uploads."""
    try:
        return integrations.images.authentication_parameters()
    except ImageHostNotConfiguredError:
        logger.error("upload_auth_not_configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="ImageKit server configuration is incomplete.",
        )

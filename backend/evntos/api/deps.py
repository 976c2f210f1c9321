"""
Shared request dependencies.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from evntos.core.config import get_settings
from evntos.core.security import get_current_user_id
from evntos.db.session import get_db
from evntos.infrastructure import Integrations, build_integrations
from evntos.models.user import User
from evntos.services.auth_service import get_active_user


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await get_active_user(db, user_id)


def get_integrations(request: Request) -> Integrations:
    """Outbound clients built at startup; built lazily if startup hooks did not run."""
    integrations = getattr(request.app.state, "integrations", None)
    if integrations is None:
        integrations = build_integrations(get_settings())
        request.app.state.integrations = integrations
    return integrations

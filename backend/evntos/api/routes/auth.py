"""
Authentication endpoints: register, login and current profile.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from evntos.api.deps import get_current_user, get_integrations
from evntos.db.session import get_db
from evntos.infrastructure import Integrations
from evntos.models.user import User
from evntos.schemas.user import UserCreate, UserResponse, UserLogin, Token
from evntos.services.auth_service import register_user, authenticate_user
from evntos.services.notification_service import send_welcome_email

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    integrations: Integrations = Depends(get_integrations),
):
    """Register a new organizer account and send the welcome email (best effort)."""
    user = await register_user(db, user_data)
    await send_welcome_email(integrations.mailer, integrations.settings, user)
    return UserResponse.from_user(user)


@router.post("/login", response_model=Token)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    token = await authenticate_user(db, login_data)
    return Token(access_token=token)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    """Profile of the authenticated user, including the derived admin flag."""
    return UserResponse.from_user(user)

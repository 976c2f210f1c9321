"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from evntos.api.routes import auth, events, public, registrations, uploads

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(events.router)
api_router.include_router(registrations.router)
api_router.include_router(public.router)
api_router.include_router(uploads.router)

"""
evntos API - Main Application Entry Point

Event management backend:
- Organizer accounts and event CRUD with generated public slugs
- Public registration with emailed QR-coded PDF tickets
- Door scanning that checks guests in against the registration store
- Guest list CSV export and event image uploads
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from evntos.core.config import get_settings
from evntos.core.logging import setup_logging, get_logger
from evntos.core.metrics import metrics_endpoint
from evntos.api.router import api_router
from evntos.api.middleware import RequestLoggingMiddleware
from evntos.db.session import dispose_engine
from evntos.infrastructure import build_integrations
from evntos.services.cache_service import get_redis, close_redis, get_cache_stats

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    integrations = build_integrations(settings)
    app.state.integrations = integrations
    logger.info(
        "integrations_ready",
        slug_ai=integrations.slugs.enabled,
        email=integrations.mailer.enabled,
        image_host=integrations.images.enabled,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    yield

    await integrations.aclose()
    await close_redis()
    await dispose_engine()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event management API: registrations, QR tickets and door check-in",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": cache_stats,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }

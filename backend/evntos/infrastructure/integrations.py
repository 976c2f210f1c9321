"""
Holder for the outbound service clients.

One instance is built at startup, stored on `app.state`, and handed to
request handlers through a dependency. All clients share one httpx pool.
"""

from typing import Optional

import httpx

from evntos.core.config import Settings
from evntos.infrastructure.image_host import ImageKitClient
from evntos.infrastructure.mailer import ResendMailer
from evntos.infrastructure.slug_ai import GeminiSlugClient


class Integrations:
    def __init__(
        self,
        http: httpx.AsyncClient,
        slugs: GeminiSlugClient,
        mailer: ResendMailer,
        images: ImageKitClient,
        settings: Settings,
    ):
        self.http = http
        self.slugs = slugs
        self.mailer = mailer
        self.images = images
        self.settings = settings

    async def aclose(self) -> None:
        await self.http.aclose()


def build_integrations(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Integrations:
    http = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport)
    return Integrations(
        http=http,
        slugs=GeminiSlugClient(
            http,
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_API_URL,
        ),
        mailer=ResendMailer(
            http,
            api_key=settings.RESEND_API_KEY,
            base_url=settings.RESEND_API_URL,
        ),
        images=ImageKitClient(
            http,
            public_key=settings.IMAGEKIT_PUBLIC_KEY,
            private_key=settings.IMAGEKIT_PRIVATE_KEY,
            url_endpoint=settings.IMAGEKIT_URL_ENDPOINT,
            upload_url=settings.IMAGEKIT_UPLOAD_URL,
            folder=settings.IMAGEKIT_UPLOAD_FOLDER,
        ),
        settings=settings,
    )

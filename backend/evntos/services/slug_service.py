"""
Slug generation for public event URLs.

The remote model is asked first; its answer goes through the same
normalization as the local fallback, so every slug that reaches the store
matches ^[a-z0-9-]{1,50}$ regardless of what the model returned.

Uniqueness is enforced at write time by suffixing -2, -3, ... on collision.
"""

import re
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evntos.core.logging import get_logger
from evntos.core.metrics import record_slug_generation
from evntos.infrastructure.slug_ai import GeminiSlugClient, SlugGenerationError
from evntos.models.event import Event

logger = get_logger(__name__)

MAX_SLUG_LENGTH = 50
EMPTY_SLUG = "event"

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUNS = re.compile(r"-{2,}")


def normalize_slug(text: str) -> str:
    """Lowercase, hyphenate whitespace, drop everything else, cap at 50 chars.

    May return an empty string when nothing usable is left.
    """
    slug = _WHITESPACE.sub("-", text.strip().lower())
    slug = _DISALLOWED.sub("", slug)
    slug = _HYPHEN_RUNS.sub("-", slug).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


def fallback_slug(title: str) -> str:
    return normalize_slug(title) or EMPTY_SLUG


async def generate_slug(title: str, client: Optional[GeminiSlugClient]) -> str:
    """Ask the model for a slug; fall back to local rules on any failure."""
    if client is not None and client.enabled:
        try:
            suggestion = normalize_slug(await client.suggest_slug(title))
            if suggestion:
                record_slug_generation("remote")
                return suggestion
            logger.warning("slug_generation_empty", title=title)
        except SlugGenerationError as e:
            logger.warning("slug_generation_failed", title=title, error=str(e))

    record_slug_generation("fallback")
    return fallback_slug(title)


def _with_suffix(base: str, n: int) -> str:
    suffix = f"-{n}"
    return base[: MAX_SLUG_LENGTH - len(suffix)].rstrip("-") + suffix


async def ensure_unique_slug(
    db: AsyncSession,
    base: str,
    exclude_event_id: Optional[str] = None,
) -> str:
    """Return `base`, or the first free `base-N`, among all stored events."""
    stem = base[: MAX_SLUG_LENGTH - 4].rstrip("-")
    query = select(Event.slug).where(
        (Event.slug == base) | (Event.slug.like(f"{stem}%"))
    )
    if exclude_event_id is not None:
        query = query.where(Event.id != exclude_event_id)
    taken = set((await db.execute(query)).scalars().all())

    if base not in taken:
        return base

    n = 2
    while _with_suffix(base, n) in taken:
        n += 1
    slug = _with_suffix(base, n)
    logger.info("slug_collision_resolved", base=base, slug=slug)
    return slug

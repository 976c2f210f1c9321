"""
Gemini text-generation client used to suggest URL slugs for event titles.
"""

from typing import Optional

import httpx


SLUG_PROMPT = """You are an expert in generating SEO-friendly URL slugs.

Generate a URL slug based on the following event title:

Title: {title}

The slug should be lowercase, contain only letters, numbers, and hyphens, and be as concise as possible.
Ensure that the slug is unique and accurately represents the event. Do not include the words "event", "title", or "url" in the slug.
If the title is already SEO-friendly, just use the same title but in lowercase.
The maximum length should be 50 characters.
Respond with the slug only."""


class SlugGenerationError(Exception):
    """The remote model could not produce a slug."""


class GeminiSlugClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: Optional[str],
        model: str,
        base_url: str,
    ):
        self.http = http
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def suggest_slug(self, title: str) -> str:
        """Return the raw model answer. Callers are expected to normalize it."""
        if not self.enabled:
            raise SlugGenerationError("Slug generation is not configured")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": SLUG_PROMPT.format(title=title)}]}],
            "generationConfig": {"temperature": 0.2, "maxOutputTokens": 64},
        }
        try:
            response = await self.http.post(url, params={"key": self.api_key}, json=payload)
            response.raise_for_status()
            body = response.json()
            return body["candidates"][0]["content"]["parts"][0]["text"]
        except httpx.HTTPStatusError as e:
            raise SlugGenerationError(f"Model returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SlugGenerationError(f"Model request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise SlugGenerationError("Malformed model response") from e

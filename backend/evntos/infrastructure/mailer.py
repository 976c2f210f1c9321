"""
Resend transactional email client.
"""

import base64
from typing import Optional

import httpx


class EmailNotConfiguredError(Exception):
    """No API key is configured for the email provider."""


class EmailDeliveryError(Exception):
    """The provider rejected the message or could not be reached."""


class Attachment:
    def __init__(self, filename: str, content: bytes):
        self.filename = filename
        self.content = content

    def to_payload(self) -> dict:
        return {
            "filename": self.filename,
            "content": base64.b64encode(self.content).decode("ascii"),
        }


class ResendMailer:
    def __init__(self, http: httpx.AsyncClient, api_key: Optional[str], base_url: str):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def send(
        self,
        sender: str,
        to: list[str],
        subject: str,
        html: str,
        attachments: Optional[list[Attachment]] = None,
    ) -> str:
        """Send one message and return the provider's email id."""
        if not self.enabled:
            raise EmailNotConfiguredError("Resend API key is not configured")

        payload = {"from": sender, "to": to, "subject": subject, "html": html}
        if attachments:
            payload["attachments"] = [a.to_payload() for a in attachments]

        try:
            response = await self.http.post(
                f"{self.base_url}/emails",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Email provider unreachable: {e}") from e

        if response.is_error:
            raise EmailDeliveryError(_provider_error_message(response))

        try:
            return response.json().get("id", "")
        except ValueError:
            return ""


def _provider_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        message = body.get("message") or body.get("name")
        if isinstance(message, str) and message.strip():
            return message
    return f"HTTP {response.status_code}"

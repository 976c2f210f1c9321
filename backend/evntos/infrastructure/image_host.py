"""
ImageKit client: server-side uploads and signed parameters for
browser-side uploads.
"""

import hashlib
import hmac
import time
import uuid
from typing import Optional

import httpx

# ImageKit rejects signatures whose expiry is more than an hour out
AUTH_PARAMS_TTL_SECONDS = 60 * 30


class ImageHostNotConfiguredError(Exception):
    pass


class ImageHostError(Exception):
    pass


class ImageKitClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        public_key: Optional[str],
        private_key: Optional[str],
        url_endpoint: Optional[str],
        upload_url: str,
        folder: str,
    ):
        self.http = http
        self.public_key = public_key
        self.private_key = private_key
        self.url_endpoint = url_endpoint
        self.upload_url = upload_url
        self.folder = folder

    @property
    def enabled(self) -> bool:
        return bool(self.public_key and self.private_key and self.url_endpoint)

    def _require_config(self) -> None:
        if not self.enabled:
            raise ImageHostNotConfiguredError(
                "ImageKit configuration is missing. Please check your environment variables."
            )

    def authentication_parameters(
        self, token: Optional[str] = None, expire: Optional[int] = None
    ) -> dict:
        self._require_config()
        token = token or str(uuid.uuid4())
        expire = expire or int(time.time()) + AUTH_PARAMS_TTL_SECONDS
        signature = hmac.new(
            self.private_key.encode("utf-8"),
            f"{token}{expire}".encode("utf-8"),
            hashlib.sha1,
        ).hexdigest()
        return {"token": token, "expire": expire, "signature": signature}

    async def upload(self, filename: str, content: bytes, content_type: Optional[str] = None) -> dict:
        """Forward a file to ImageKit and return the provider's JSON verbatim."""
        self._require_config()
        try:
            response = await self.http.post(
                self.upload_url,
                auth=(self.private_key, ""),
                data={
                    "fileName": filename,
                    "folder": self.folder,
                    "useUniqueFileName": "true",
                },
                files={"file": (filename, content, content_type or "application/octet-stream")},
            )
        except httpx.HTTPError as e:
            raise ImageHostError(f"Image host unreachable: {e}") from e

        if response.is_error:
            try:
                message = response.json().get("message")
            except ValueError:
                message = None
            raise ImageHostError(message or f"Upload failed with HTTP {response.status_code}")

        return response.json()

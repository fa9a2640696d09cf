"""
Cloudinary API client

Thin async wrapper around the Cloudinary upload API: signed uploads with an
incoming transformation, and deletion by public id.
"""
import time
import hashlib
import logging
from typing import Optional
import httpx

from apps.shared.config import Settings
from apps.shared.errors import UpstreamMediaError, ValidationError
from apps.media.schemas import UploadResult
from apps.media.utils import public_id_from_url

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.cloudinary.com/v1_1"

# Bound to 1200x630, automatic quality, stored as WebP
UPLOAD_TRANSFORMATION = "c_limit,h_630,q_auto,w_1200/f_webp"

REQUEST_TIMEOUT = 30.0


def sign_params(params: dict, api_secret: str) -> str:
    """
    Compute the Cloudinary request signature.
    Parameters are sorted by name and joined as k=v pairs with '&',
    then the API secret is appended and the whole string SHA-1 hashed.
    """
    to_sign = "&".join(
        f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryClient:
    """Uploads and deletes images on Cloudinary."""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.transport = transport
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryClient":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _signed(self, params: dict) -> dict:
        if not self.configured:
            raise UpstreamMediaError("Image host credentials are not configured")

        payload = dict(params, timestamp=str(int(time.time())))
        payload["signature"] = sign_params(payload, self.api_secret)
        payload["api_key"] = self.api_key
        return payload

    async def _post(self, action: str, data: dict, files: Optional[dict] = None) -> dict:
        url = f"{API_BASE_URL}/{self.cloud_name}/image/{action}"

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(url, data=data, files=files)
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary {action} request failed: {e}")
            raise UpstreamMediaError(f"Image host {action} request failed") from e

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamMediaError(f"Image host returned an unreadable {action} response") from e

        if response.status_code >= 400:
            message = ""
            if isinstance(body, dict):
                message = (body.get("error") or {}).get("message", "")
            logger.error(f"Cloudinary {action} rejected ({response.status_code}): {message}")
            raise UpstreamMediaError(f"Image host rejected {action}: {message or response.status_code}")

        if not isinstance(body, dict):
            raise UpstreamMediaError(f"Image host returned an unreadable {action} response")

        return body

    async def upload(
        self,
        data: bytes,
        folder: str = "portfolio/projects",
        filename: str = "upload",
    ) -> UploadResult:
        """
        Upload raw image bytes.
        Returns the secure URL and public id assigned by Cloudinary.
        """
        payload = self._signed({"folder": folder, "transformation": UPLOAD_TRANSFORMATION})
        body = await self._post("upload", payload, files={"file": (filename, data)})

        if not body.get("public_id") or not body.get("secure_url"):
            raise UpstreamMediaError("Image host response did not include a public id")

        logger.info(f"Uploaded image {body['public_id']} ({body.get('bytes')} bytes)")
        return UploadResult(
            secure_url=body["secure_url"],
            public_id=body["public_id"],
            format=body.get("format"),
            bytes=body.get("bytes"),
        )

    async def destroy(self, public_id: str) -> dict:
        """Delete an image by public id. Anything but result == 'ok' is an error."""
        if not public_id:
            raise ValidationError("Public ID is required")

        body = await self._post("destroy", self._signed({"public_id": public_id}))

        if body.get("result") != "ok":
            raise UpstreamMediaError(f"Failed to delete image: {body.get('result')}")

        logger.info(f"Deleted image {public_id}")
        return body

    async def destroy_by_url(self, url: str) -> tuple[str, dict]:
        """Delete the image behind a delivery URL."""
        if not url:
            raise ValidationError("Image URL is required")

        public_id = public_id_from_url(url)
        if not public_id:
            raise ValidationError("Invalid Cloudinary URL")

        result = await self.destroy(public_id)
        return public_id, result

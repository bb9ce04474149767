"""Upload student profile images to Cloudinary using its signed upload API."""

from __future__ import annotations

import hashlib
import logging
import time
from pathlib import PurePath
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE_URL = "https://api.cloudinary.com/v1_1"

ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpeg", ".jpg", ".png", ".gif"})
ALLOWED_IMAGE_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif"})


class ImageUploadNotConfiguredError(Exception):
    """Raised when an upload is attempted but Cloudinary credentials are missing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ImageUploadError(Exception):
    """Raised when Cloudinary rejects the upload or returns no secure_url."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def is_allowed_image(filename: str | None, content_type: str | None) -> bool:
    """Both the file extension and the declared content type must be an allowed image type."""
    if not filename or not content_type:
        return False
    extension = PurePath(filename).suffix.lower()
    mime = content_type.split(";")[0].strip().lower()
    return extension in ALLOWED_IMAGE_EXTENSIONS and mime in ALLOWED_IMAGE_CONTENT_TYPES


def _is_cloudinary_configured(settings: Settings) -> bool:
    if not settings.CLOUDINARY_CLOUD_NAME or not settings.CLOUDINARY_CLOUD_NAME.strip():
        return False
    if not settings.CLOUDINARY_API_KEY or not settings.CLOUDINARY_API_KEY.strip():
        return False
    if settings.CLOUDINARY_API_SECRET is None:
        return False
    return bool(settings.CLOUDINARY_API_SECRET.get_secret_value().strip())


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """
    Cloudinary request signature: SHA-1 of the sorted 'key=value' pairs joined
    with '&', followed directly by the API secret.
    """
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


async def upload_image(
    content: bytes,
    filename: str,
    content_type: str,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    Upload image bytes to the configured Cloudinary folder and return its secure_url.

    Raises ImageUploadNotConfiguredError if credentials are missing and
    ImageUploadError on any Cloudinary or transport failure.
    """
    if not _is_cloudinary_configured(settings):
        raise ImageUploadNotConfiguredError(
            "Cloudinary is not configured; set CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET."
        )
    cloud_name = (settings.CLOUDINARY_CLOUD_NAME or "").strip()
    api_key = (settings.CLOUDINARY_API_KEY or "").strip()
    api_secret = settings.CLOUDINARY_API_SECRET.get_secret_value().strip()

    params: dict[str, Any] = {
        "folder": settings.CLOUDINARY_FOLDER,
        "timestamp": int(time.time()),
    }
    data = {key: str(value) for key, value in params.items()}
    data.update(api_key=api_key, signature=sign_params(params, api_secret))
    url = f"{CLOUDINARY_API_BASE_URL}/{cloud_name}/image/upload"
    files = {"file": (filename, content, content_type)}

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient()
    try:
        resp = await client.post(
            url,
            data=data,
            files=files,
            timeout=settings.CLOUDINARY_REQUEST_TIMEOUT_SEC,
        )
    except httpx.HTTPError as e:
        raise ImageUploadError(f"Cloudinary request failed: {e!s}") from e
    finally:
        if owns_client:
            await client.aclose()

    if resp.status_code >= 400:
        try:
            detail = resp.json().get("error", {}).get("message") or resp.text[:500]
        except ValueError:
            detail = resp.text[:500] if resp.text else "Unknown error"
        raise ImageUploadError(f"Cloudinary returned {resp.status_code}: {detail}", resp.status_code)

    secure_url = resp.json().get("secure_url")
    if not secure_url:
        raise ImageUploadError("Cloudinary response missing secure_url.")
    logger.info("Image uploaded to Cloudinary: %s", secure_url)
    return secure_url

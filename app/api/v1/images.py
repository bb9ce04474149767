"""Image upload endpoint: student profile pictures stored on Cloudinary."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.api.v1.auth import require_permissions
from app.core.config import get_settings
from app.schemas.auth import CurrentUser
from app.schemas.upload import ImageUploadResponse
from app.services.image_upload import (
    ImageUploadError,
    ImageUploadNotConfiguredError,
    is_allowed_image,
    upload_image,
)
from app.services.permissions import MANAGE_LIBRARY_STUDENTS

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/upload-image", response_model=ImageUploadResponse)
async def upload_student_image(
    _user: Annotated[CurrentUser, Depends(require_permissions([MANAGE_LIBRARY_STUDENTS]))],
    image: Annotated[UploadFile | None, File()] = None,
) -> ImageUploadResponse:
    """
    Upload a student profile image (multipart field `image`).

    Only jpeg, jpg, png and gif are accepted, checked by both file extension
    and content type, up to MAX_IMAGE_UPLOAD_BYTES. Returns the image URL.
    """
    settings = get_settings()
    if image is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if not is_allowed_image(image.filename, image.content_type):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Only images (jpeg, jpg, png, gif) are allowed",
        )
    # Read one byte past the limit so oversized files are detected without buffering them fully.
    content = await image.read(settings.MAX_IMAGE_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_IMAGE_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size must not exceed {settings.MAX_IMAGE_UPLOAD_BYTES // 1024} KB.",
        )
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")

    try:
        url = await upload_image(content, image.filename or "image", image.content_type, settings)
    except ImageUploadNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message) from e
    except ImageUploadError as e:
        logger.error("Error uploading image to Cloudinary: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Image upload failed with Cloudinary",
        ) from e
    return ImageUploadResponse(image_url=url)

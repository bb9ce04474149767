"""Response schema for the image upload endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class ImageUploadResponse(BaseModel):
    """Secure URL of the uploaded image, serialized as imageUrl for the frontend."""

    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(..., alias="imageUrl", description="HTTPS URL of the image on Cloudinary.")

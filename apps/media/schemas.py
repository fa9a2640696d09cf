"""
Pydantic schemas for the media endpoints.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UploadResult(BaseModel):
    """Fields we keep from a Cloudinary upload response."""
    secure_url: str
    public_id: str
    format: Optional[str] = None
    bytes: Optional[int] = None


class ImageUploadResponse(BaseModel):
    """Response after successful image upload."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    image_url: str
    public_id: str
    format: Optional[str] = None
    bytes: Optional[int] = None


class ImageDeleteResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    message: str = "Image deleted successfully"
    public_id: str
    result: dict


class OptimizedImageResponse(BaseModel):
    url: str

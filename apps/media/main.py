"""
Media API

Image upload and deletion relayed to Cloudinary.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, File, Query

from apps.shared.auth import require_admin
from apps.media.client import CloudinaryClient
from apps.media.utils import optimized_image_url
from apps.media.schemas import (
    ImageUploadResponse,
    ImageDeleteResponse,
    OptimizedImageResponse,
)

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

router = APIRouter(tags=["media"])


def get_media(request: Request) -> CloudinaryClient:
    """Dependency returning the media client created at startup."""
    return request.app.state.media


@router.post("/upload", response_model=ImageUploadResponse)
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    api_key: str = Depends(require_admin),
    media: CloudinaryClient = Depends(get_media),
):
    """
    Upload a project image.
    Returns the hosted URL and public id of the stored image.
    """
    if image is None:
        raise HTTPException(status_code=400, detail="No image file provided")

    if image.content_type not in ALLOWED_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_TYPES))}",
        )

    contents = await image.read()
    if not contents:
        raise HTTPException(status_code=400, detail="No image file provided")
    if len(contents) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {MAX_FILE_SIZE // (1024*1024)} MB",
        )

    folder = request.app.state.settings.media_folder
    result = await media.upload(contents, folder=folder, filename=image.filename or "upload")

    return ImageUploadResponse(
        image_url=result.secure_url,
        public_id=result.public_id,
        format=result.format,
        bytes=result.bytes,
    )


@router.delete("/images", response_model=ImageDeleteResponse)
async def delete_image(
    url: Optional[str] = Query(None),
    api_key: str = Depends(require_admin),
    media: CloudinaryClient = Depends(get_media),
):
    """Delete a hosted image by its URL."""
    public_id, result = await media.destroy_by_url(url)
    return ImageDeleteResponse(public_id=public_id, result=result)


@router.get("/images/optimized", response_model=OptimizedImageResponse)
def get_optimized_url(
    request: Request,
    public_id: str = Query(..., alias="publicId", min_length=1),
    width: int = Query(800, gt=0),
    height: int = Query(600, gt=0),
):
    """Delivery URL for a resized copy of a hosted image."""
    cloud_name = request.app.state.settings.cloudinary_cloud_name
    if not cloud_name:
        raise HTTPException(status_code=400, detail="Image host is not configured")
    return OptimizedImageResponse(url=optimized_image_url(cloud_name, public_id, width, height))

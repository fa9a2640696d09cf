"""
Helpers for Cloudinary image URLs
"""
import re
from typing import Optional, Union

DELIVERY_BASE_URL = "https://res.cloudinary.com"

# Tried in order: versioned path, transformation-qualified path, bare upload path
PUBLIC_ID_PATTERNS = [
    re.compile(r"/v\d+/(.+)\.\w+$"),
    re.compile(r"/image/upload/.*/(.+)\.\w+$"),
    re.compile(r"cloudinary\.com/.*/upload/(.+)\.\w+$"),
]

VERSION_PREFIX = re.compile(r"^v\d+/")


def is_media_url(url) -> bool:
    """Check whether a URL points at the image host."""
    return isinstance(url, str) and bool(url) and "cloudinary" in url


def public_id_from_url(url) -> Optional[str]:
    """
    Extract the Cloudinary public id from a delivery URL.
    Returns None when the URL does not match a known shape.
    """
    if not url or not isinstance(url, str):
        return None

    for pattern in PUBLIC_ID_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return VERSION_PREFIX.sub("", match.group(1))

    return None


def optimized_image_url(
    cloud_name: str,
    public_id: str,
    width: int = 800,
    height: int = 600,
    quality: Union[str, int] = "auto",
    fmt: str = "webp",
) -> str:
    """Build a delivery URL that crops to fill the given box."""
    transformation = f"c_fill,f_auto,h_{height},q_{quality},w_{width}"
    return f"{DELIVERY_BASE_URL}/{cloud_name}/image/upload/{transformation}/{public_id}.{fmt}"

"""
Best-effort image cleanup run after project updates and deletions
"""
import logging
from typing import Optional

from apps.media.utils import is_media_url, public_id_from_url

logger = logging.getLogger(__name__)


async def discard_image(media, image_url: Optional[str]) -> bool:
    """
    Delete a hosted image, never raising.

    Callers use this for cleanup that must not fail the surrounding
    operation: every error is logged and reported as False.
    Returns True only when the host confirmed the deletion.
    """
    if media is None or not is_media_url(image_url):
        return False

    public_id = public_id_from_url(image_url)
    if not public_id:
        logger.info(f"No public id in {image_url}, nothing to delete")
        return False

    try:
        await media.destroy(public_id)
    except Exception as e:
        logger.warning(f"Could not delete image {public_id}: {e}")
        return False

    logger.info(f"Deleted old image {public_id}")
    return True

"""
Image Host - uploads staged images to Cloudinary.

upload(local_path) returns {"url": ...} or None. The local file is removed
in every case so the temp directory does not fill up.
"""

import logging
import os
from typing import Optional

import cloudinary
import cloudinary.uploader

from portal.core.config import get_settings

logger = logging.getLogger(__name__)


class CloudinaryImageHost:

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def upload(self, local_path: Optional[str]) -> Optional[dict]:
        if not local_path:
            return None
        try:
            result = cloudinary.uploader.upload(local_path, resource_type="auto")
            url = result.get("secure_url") or result.get("url")
            if not url:
                return None
            logger.info("Uploaded %s to Cloudinary", os.path.basename(local_path))
            return {"url": url}
        except Exception:
            logger.warning("Cloudinary upload failed for %s", os.path.basename(local_path), exc_info=True)
            return None
        finally:
            if os.path.exists(local_path):
                os.remove(local_path)


_image_host: CloudinaryImageHost = None


def get_image_host() -> CloudinaryImageHost:
    """Singleton image host built from settings."""
    global _image_host
    if _image_host is None:
        settings = get_settings()
        _image_host = CloudinaryImageHost(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )
    return _image_host

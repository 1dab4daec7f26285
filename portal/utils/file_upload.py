"""
File Upload Utility - stage uploaded images on local disk.

Incoming multipart images are written to UPLOAD_DIR and handed to the
image host by path. The image host removes the file once it is done.

Supported formats: JPG, JPEG, PNG, GIF, WEBP
Max file size: MAX_IMAGE_SIZE_MB (default 5MB)
"""

import os
import uuid
from typing import Optional
from fastapi import UploadFile

from portal.core.config import get_settings
from portal.core.errors import ApiError, BadRequestError

ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}


class FileTooLargeError(ApiError):
    status_code = 413
    default_message = "File too large"


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def save_upload_to_temp(file: Optional[UploadFile]) -> Optional[str]:
    """
    Write an uploaded image to the temp directory.

    Args:
        file: FastAPI UploadFile, or None when the field was not sent

    Returns:
        Local path of the staged file, or None if no file was sent

    Raises:
        BadRequestError on unsupported type or empty file
        FileTooLargeError when the size limit is exceeded
    """
    if file is None or not file.filename:
        return None

    settings = get_settings()
    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise BadRequestError(
            f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

    content = await file.read()
    if not content:
        raise BadRequestError("Uploaded file is empty")

    max_bytes = settings.max_image_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise FileTooLargeError(f"File too large. Maximum size: {settings.max_image_size_mb}MB")

    os.makedirs(settings.upload_dir, exist_ok=True)
    path = os.path.join(settings.upload_dir, f"{uuid.uuid4().hex}{ext}")
    with open(path, "wb") as fh:
        fh.write(content)
    return path

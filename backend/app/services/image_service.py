"""
Image storage for event pictures.
"""
import logging
import os
import uuid
from typing import Optional
from fastapi import UploadFile
from app.core.config import settings
from app.core.exceptions import ImageUploadFailed, ValidationError

logger = logging.getLogger(__name__)


def get_file_url(file_path: str, base_url: str = "") -> str:
    """Convert file path to URL for static file serving."""
    # "app/static/photo.jpg" -> "<base_url>/static/photo.jpg"
    filename = os.path.basename(file_path)
    return f"{base_url.rstrip('/')}/static/{filename}"


class LocalImageStore:
    """Saves uploads under UPLOAD_DIR, served by the /static mount."""

    def __init__(self, upload_dir: str, base_url: str = "", max_size: Optional[int] = None, allowed_types=None):
        self.upload_dir = upload_dir
        self.base_url = base_url
        self.max_size = max_size if max_size is not None else settings.MAX_UPLOAD_SIZE
        self.allowed_types = allowed_types if allowed_types is not None else settings.ALLOWED_IMAGE_TYPES

    async def upload(self, file: UploadFile) -> str:
        """Store the file and return its public URL."""
        if file.content_type not in self.allowed_types:
            raise ValidationError(f"Invalid file type: {file.content_type}")

        content = await file.read()
        if not content:
            raise ValidationError("Image is required.")
        if len(content) > self.max_size:
            raise ValidationError(f"Image exceeds the {self.max_size // (1024 * 1024)}MB upload limit")

        file_ext = os.path.splitext(file.filename or "")[1].lower()
        unique_filename = f"{uuid.uuid4()}{file_ext}"
        file_path = os.path.join(self.upload_dir, unique_filename)

        try:
            os.makedirs(self.upload_dir, exist_ok=True)
            with open(file_path, "wb") as buffer:
                buffer.write(content)
        except OSError as e:
            logger.error(f"Failed to store image {file.filename}: {e}", exc_info=True)
            raise ImageUploadFailed(cause=e)

        return get_file_url(file_path, self.base_url)


def get_image_store() -> LocalImageStore:
    """Dependency returning the configured image store."""
    return LocalImageStore(settings.UPLOAD_DIR, base_url=settings.PUBLIC_BASE_URL)

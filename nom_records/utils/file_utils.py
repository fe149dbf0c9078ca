"""
Upload storage for area and questionnaire images.
Files land in UPLOAD_DIR under a generated name and are referenced as /uploads/<name>.
"""
import logging
import uuid
from pathlib import Path
from typing import List, Optional

from fastapi import HTTPException, Request, UploadFile, status

from nom_records.core.config import Settings

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/"


class ImageStore:
    """Validates and stores uploaded images on disk"""

    def __init__(self, upload_dir: str, max_file_size: int, allowed_types: List[str]):
        """Initialize the store and ensure the upload directory exists"""
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.max_file_size = max_file_size
        self.allowed_types = allowed_types
        logger.info(f"Image store initialized. Upload directory: {self.upload_dir}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageStore":
        return cls(settings.UPLOAD_DIR, settings.MAX_FILE_SIZE, settings.ALLOWED_IMAGE_TYPES)

    def validate(self, file: UploadFile) -> None:
        """
        Validate an uploaded image

        Raises:
            HTTPException if the type is not allowed or the file is too large
        """
        if file.content_type not in self.allowed_types:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File type {file.content_type} not allowed for {file.filename}"
            )

        file.file.seek(0, 2)
        file_size = file.file.tell()
        file.file.seek(0)

        if file_size > self.max_file_size:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File {file.filename} exceeds maximum size of {self.max_file_size / (1024*1024)}MB"
            )

    async def save(self, upload_file: Optional[UploadFile]) -> Optional[str]:
        """
        Store an optional upload under a collision-resistant name

        Returns:
            Public path ("/uploads/<name>") or None when nothing was uploaded
        """
        if upload_file is None or not upload_file.filename:
            return None

        self.validate(upload_file)

        suffix = Path(upload_file.filename).suffix.lower()
        stored_name = f"{uuid.uuid4().hex}{suffix}"
        file_path = self.upload_dir / stored_name

        with open(file_path, "wb") as buffer:
            content = await upload_file.read()
            buffer.write(content)

        logger.info(f"Stored upload {upload_file.filename} as {stored_name} ({len(content)} bytes)")
        return PUBLIC_PREFIX + stored_name

    def discard(self, public_path: Optional[str]) -> None:
        """Remove a stored file given its public path (used when the owning write rolls back)"""
        if not public_path or not public_path.startswith(PUBLIC_PREFIX):
            return
        file_path = self.upload_dir / public_path[len(PUBLIC_PREFIX):]
        try:
            if file_path.exists():
                file_path.unlink()
                logger.info(f"Removed orphaned upload: {file_path.name}")
        except OSError as e:
            logger.error(f"Error removing upload {file_path.name}: {str(e)}")


def get_image_store(request: Request) -> ImageStore:
    """Dependency that returns the application's image store."""
    return request.app.state.image_store

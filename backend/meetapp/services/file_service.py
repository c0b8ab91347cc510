"""
Meetapp Backend: File Storage Service
======================================

What:  Validates, stores and serves uploaded meetup banners.
How:   Checks extension, size and sniffed MIME type, writes the bytes under a
       random filename, then records a File row.
Who:   Called by the /files route handlers.

Upload checks (cheapest first):
    1. Extension:  .png, .jpg, .jpeg
    2. Size:       non-empty and at most settings.max_file_size
    3. MIME type:  python-magic reads the header bytes; must be PNG or JPEG
    4. Filename:   16 random bytes, hex encoded, plus the original extension;
                   no user input reaches the file system path
"""

import logging
import os
import secrets
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.config import settings
from meetapp.exceptions import (
    DatabaseError,
    FileStorageError,
    MeetappError,
    NotFoundError,
    ValidationError,
)
from meetapp.models.file import File
from meetapp.schemas.file import FileResponse

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}


class FileService:
    """
    Manages the banner upload lifecycle.

    Directory Structure:
        tmp/uploads/
        ├── 3f9c0a5e1b7d4c2a9e8f6d5c4b3a2910.jpg
        └── a1b2c3d4e5f60718293a4b5c6d7e8f90.png
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized (lowercase) extension.

        Raises:
            ValidationError: extension not in ALLOWED_EXTENSIONS
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"Invalid file type, accepted [{', '.join(ALLOWED_MIME_TYPES)}]."
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Checks the declared size first (rejects before trusting the body), then
        the actual byte count.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="file")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, file_content: bytes) -> str:
        """
        Detect the real MIME type from the file's magic bytes.

        Raises:
            FileStorageError: libmagic unavailable or detection failed
            ValidationError: detected type is not PNG or JPEG
        """
        try:
            import magic
            mime_type = magic.from_buffer(file_content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"Invalid file type, accepted [{', '.join(ALLOWED_MIME_TYPES)}]."
                ),
                field="file",
                context={"detected_mime": mime_type},
            )

        return mime_type

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, stored_name) for a fresh random filename."""
        stored_name = f"{secrets.token_hex(16)}{extension}"
        return self.storage_root / stored_name, stored_name

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated content to disk.

        Returns:
            (absolute_path, stored_name)

        Raises:
            FileStorageError: directory creation or write failed
        """
        absolute_path, stored_name = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("File stored: %s (%d bytes)", stored_name, len(content))
            return str(absolute_path), stored_name

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    async def cleanup_file(self, file_path: str) -> None:
        """
        Best-effort removal of a stored file after a failed upload.

        Missing files are ignored; other OS errors are logged, not raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """Run every check, then store. Returns (absolute_path, stored_name)."""
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content)
        return await self.store_file(content, ext)

    async def upload(
        self,
        db: AsyncSession,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> FileResponse:
        """
        Validate and store an upload, then create its File row.

        Error Recovery:
            Validation fails  → ValidationError (400), nothing stored
            Storage fails     → FileStorageError (500)
            Database fails    → stored file is removed, DatabaseError (500)
        """
        absolute_path: Optional[str] = None
        try:
            absolute_path, stored_name = await self.validate_and_store(
                filename=filename,
                content=content,
                content_length=content_length,
            )

            record = File(name=filename, path=stored_name)
            db.add(record)
            await db.flush()
            logger.info("File record created: %s (%s)", record.id, stored_name)

            return FileResponse.model_validate(record)

        except MeetappError:
            raise
        except Exception as e:
            if absolute_path:
                await self.cleanup_file(absolute_path)
            logger.error("Unexpected error storing upload: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="An error occurred while saving your file. Please try again.",
                context={"original_error": type(e).__name__},
            )

    def resolve_path(self, file_path: str) -> Path:
        """
        Map a stored filename to its absolute path for serving.

        Raises:
            ValidationError: the path escapes the storage root
            NotFoundError: no such file
        """
        full_path = (self.storage_root / file_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path")
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=file_path)
        return full_path


file_service = FileService()

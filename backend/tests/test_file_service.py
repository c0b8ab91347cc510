"""
Meetapp Backend: File Service Unit Tests
=========================================

What:  Banner upload validation, storage, cleanup and path resolution.
How:   A FileService rooted in a per-test temporary directory.

Test Strategy:
    ✅ Allowed extensions (.png, .jpg, .jpeg, any case)
    ✅ Rejected extensions (.gif, .pdf, .exe, none)
    ✅ Size limits (empty, declared too large, actual too large)
    ✅ Random stored filenames that keep the extension
    ✅ Upload creates a File row; DB failure removes the stored file
    ✅ Path traversal is refused when serving
    ❌ Real MIME sniffing needs libmagic (skipped if python-magic is unavailable)
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy import select

from meetapp.config import settings
from meetapp.exceptions import DatabaseError, FileStorageError, NotFoundError, ValidationError
from meetapp.models.file import File
from meetapp.services.file_service import FileService


@pytest.fixture
def service(tmp_path):
    return FileService(storage_root=str(tmp_path / "uploads"))


class TestFileValidation:

    @pytest.mark.parametrize("filename", ["cover.png", "cover.jpg", "cover.jpeg", "COVER.PNG", "c.Jpeg"])
    def test_allowed_extensions(self, service, filename):
        assert service.validate_extension(filename) in {".png", ".jpg", ".jpeg"}

    @pytest.mark.parametrize("filename", ["anim.gif", "doc.pdf", "run.exe", "no_extension", "png"])
    def test_rejected_extensions(self, service, filename):
        with pytest.raises(ValidationError, match=r"accepted \[image/png, image/jpeg\]"):
            service.validate_extension(filename)

    def test_empty_file(self, service):
        with pytest.raises(ValidationError, match="empty"):
            service.validate_size(None, 0)

    def test_declared_size_too_large(self, service):
        with pytest.raises(ValidationError, match="exceeds"):
            service.validate_size(settings.max_file_size + 1, 100)

    def test_actual_size_too_large(self, service):
        with pytest.raises(ValidationError, match="exceeds"):
            service.validate_size(None, settings.max_file_size + 1)

    def test_size_at_limit(self, service):
        service.validate_size(settings.max_file_size, settings.max_file_size)

    def test_mime_detection_failure_is_storage_error(self, service):
        with patch.dict("sys.modules", {"magic": None}):
            with pytest.raises(FileStorageError):
                service.validate_mime_type(b"anything")


class TestMimeSniffing:
    """Runs only where python-magic and libmagic are installed."""

    def test_png_accepted(self, service, sample_png_bytes):
        pytest.importorskip("magic")
        assert service.validate_mime_type(sample_png_bytes) == "image/png"

    def test_jpeg_accepted(self, service, sample_jpeg_bytes):
        pytest.importorskip("magic")
        assert service.validate_mime_type(sample_jpeg_bytes) == "image/jpeg"

    def test_text_disguised_as_png_rejected(self, service):
        pytest.importorskip("magic")
        with pytest.raises(ValidationError):
            service.validate_mime_type(b"just some plain text, not an image at all")


class TestStorage:

    @pytest.mark.asyncio
    async def test_store_file_random_name(self, service):
        absolute_path, stored_name = await service.store_file(b"bytes", ".png")
        _, other_name = await service.store_file(b"bytes", ".png")

        assert stored_name.endswith(".png")
        assert len(Path(stored_name).stem) == 32
        assert stored_name != other_name
        assert Path(absolute_path).read_bytes() == b"bytes"
        assert Path(absolute_path).parent == service.storage_root

    @pytest.mark.asyncio
    async def test_cleanup_file(self, service):
        absolute_path, _ = await service.store_file(b"bytes", ".jpg")
        await service.cleanup_file(absolute_path)
        assert not Path(absolute_path).exists()

        # Already gone: no error
        await service.cleanup_file(absolute_path)

    @pytest.mark.asyncio
    async def test_upload_creates_record(self, service, db_session, sample_png_bytes):
        with patch.object(service, "validate_mime_type", return_value="image/png"):
            result = await service.upload(db_session, "banner.png", sample_png_bytes, len(sample_png_bytes))

        assert result.name == "banner.png"
        assert result.path.endswith(".png")
        assert result.url == f"{settings.app_url.rstrip('/')}/files/{result.path}"
        assert (service.storage_root / result.path).is_file()

        record = (await db_session.execute(select(File).where(File.id == result.id))).scalar_one()
        assert record.path == result.path

    @pytest.mark.asyncio
    async def test_upload_rejects_before_storing(self, service, db_session):
        with pytest.raises(ValidationError):
            await service.upload(db_session, "notes.txt", b"hello", 5)

        assert list(service.storage_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_database_failure_removes_stored_file(self, service, db_session, sample_png_bytes):
        async def broken_flush(*args, **kwargs):
            raise RuntimeError("connection lost")

        with patch.object(service, "validate_mime_type", return_value="image/png"), \
             patch.object(db_session, "flush", broken_flush):
            with pytest.raises(DatabaseError):
                await service.upload(db_session, "banner.png", sample_png_bytes)

        assert list(service.storage_root.iterdir()) == []


class TestResolvePath:

    @pytest.mark.asyncio
    async def test_resolves_stored_file(self, service):
        absolute_path, stored_name = await service.store_file(b"img", ".jpg")
        assert service.resolve_path(stored_name) == Path(absolute_path)

    def test_missing_file(self, service):
        with pytest.raises(NotFoundError):
            service.resolve_path("does-not-exist.png")

    def test_traversal_refused(self, service):
        with pytest.raises(ValidationError):
            service.resolve_path("../../etc/passwd")

"""
Meetapp Backend: File Route Handlers
=====================================

What:  Banner upload (POST /files) and serving (GET /files/{path}).

Upload Flow:
    1. FastAPI parses the multipart body; the `file` field is required
    2. Content is read into memory (bounded by the size check)
    3. FileService: extension → size → MIME sniff → store → File row
    4. 201 Created with {id, name, path, url}
"""

import logging
import mimetypes

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse as FileDownload
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.database import get_db_session
from meetapp.dependencies import get_current_user
from meetapp.models.user import User
from meetapp.schemas.common import ErrorResponse
from meetapp.schemas.file import FileResponse
from meetapp.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["Files"])


@router.post(
    "",
    status_code=201,
    response_model=FileResponse,
    responses={
        400: {"description": "Invalid file type or size", "model": ErrorResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
    },
    summary="Upload a meetup banner",
    description="PNG or JPEG image, at most MAX_FILE_SIZE bytes.",
)
async def upload_file(
    file: UploadFile = File(..., description="Banner image (PNG or JPEG)"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FileResponse:
    content = await file.read()

    logger.info(
        "Upload from user %s: %s (%d bytes)",
        user.id,
        file.filename,
        len(content),
    )

    return await file_service.upload(
        db=db,
        filename=file.filename or "upload",
        content=content,
        content_length=file.size,
    )


@router.get(
    "/{file_path:path}",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded banner",
)
async def serve_file(file_path: str) -> FileDownload:
    full_path = file_service.resolve_path(file_path)
    media_type, _ = mimetypes.guess_type(full_path.name)
    return FileDownload(
        path=str(full_path),
        media_type=media_type or "application/octet-stream",
        headers={"Cache-Control": "public, max-age=86400"},
    )

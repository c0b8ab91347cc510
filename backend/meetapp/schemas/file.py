"""
Meetapp Backend: File Schemas
==============================
"""

from pydantic import BaseModel, Field


class FileResponse(BaseModel):
    """Uploaded banner, as returned by POST /files and embedded in meetups."""
    id: int = Field(description="File identifier to pass as a meetup's banner_id")
    name: str = Field(description="Original filename")
    path: str = Field(description="Stored filename")
    url: str = Field(description="Public URL of the image")

    model_config = {"from_attributes": True}


class BannerSummary(BaseModel):
    name: str
    path: str
    url: str

    model_config = {"from_attributes": True}

"""
Meetapp Backend: Meetup Schemas
================================

What:  Pydantic models defining the meetup API contract.
How:   FastAPI validates request bodies against MeetupCreate / MeetupUpdate and
       serializes ORM rows through MeetupResponse (`from_attributes`).

Timestamps:
    Clients may send offset-aware ISO 8601 values or naive ones; naive values
    are interpreted as UTC. Responses are always UTC with an offset.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from meetapp.models.types import as_utc
from meetapp.schemas.file import BannerSummary
from meetapp.schemas.user import UserSummary


class MeetupCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1, max_length=255)
    date: datetime = Field(description="Scheduled start (ISO 8601). Must be in the future.")
    banner_id: Optional[int] = Field(default=None, description="ID returned by POST /files")

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)


class MeetupUpdate(BaseModel):
    """
    Partial update: only the fields sent are changed.

    An explicit null detaches the banner; null for any other field leaves it
    unchanged.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1, max_length=255)
    date: Optional[datetime] = None
    banner_id: Optional[int] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None


class MeetupResponse(BaseModel):
    id: int
    title: str
    description: str
    location: str
    date: datetime
    past: bool = Field(description="True once the meetup date has passed")
    user_id: int = Field(description="Organizer's user ID")
    banner_id: Optional[int] = None
    organizer: UserSummary
    banner: Optional[BannerSummary] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

"""
Meetapp Backend: File SQLAlchemy Model
=======================================

What:  ORM model for the `files` table (uploaded meetup banners).
How:   `name` keeps the client's original filename; `path` is the random
       stored filename relative to `settings.storage_root`. The public URL is
       computed from `settings.app_url` so it follows deployment changes.
"""

from datetime import datetime

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from meetapp.config import settings
from meetapp.database import Base
from meetapp.models.types import UTCDateTime, utc_now


class File(Base):
    """An uploaded image that can be attached to a meetup as its banner."""

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)

    @property
    def url(self) -> str:
        return f"{settings.app_url.rstrip('/')}/files/{self.path}"

    def __repr__(self) -> str:
        return f"<File(id={self.id}, path='{self.path}')>"

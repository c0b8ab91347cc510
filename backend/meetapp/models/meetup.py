"""
Meetapp Backend: Meetup SQLAlchemy Model
=========================================

What:  ORM model for the `meetups` table.
Who:   MeetupService (CRUD, organizer listing), SubscriptionService and the
       subscription validator (owner and date checks).

Lifecycle:
    1. Created by its organizer with a future `date`
    2. Editable and deletable by the organizer while `date` is in the future
    3. Once `date` has passed (`past` is True) the meetup is immutable and
       subscriptions can neither be added nor cancelled

Query Patterns:
    - List by day: WHERE date BETWEEN :start AND :end ORDER BY date
    - Organizer view: WHERE user_id = :uid AND date > now ORDER BY date
    → both served by the (user_id) and (date) indexes
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from meetapp.database import Base
from meetapp.models.file import File
from meetapp.models.types import UTCDateTime, as_utc, utc_now
from meetapp.models.user import User


class Meetup(Base):
    """A scheduled event with one owning organizer."""

    __tablename__ = "meetups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)

    # Organizer
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    banner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("files.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now
    )

    # Async sessions cannot lazy-load: queries must selectinload these
    organizer: Mapped[User] = relationship(User, lazy="raise")
    banner: Mapped[Optional[File]] = relationship(File, lazy="raise")

    @property
    def past(self) -> bool:
        """True once the scheduled timestamp is earlier than the current time."""
        return as_utc(self.date) < utc_now()

    def __repr__(self) -> str:
        return f"<Meetup(id={self.id}, title='{self.title}', date='{self.date}')>"

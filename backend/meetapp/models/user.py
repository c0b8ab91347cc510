"""
Meetapp Backend: User SQLAlchemy Model
=======================================

What:  ORM model for the `users` table.
Who:   Used by UserService (sign-up, profile update), the session service
       (sign-in) and the auth dependency that resolves the token subject.

Table Design:
    - email is unique and indexed (sign-in lookup)
    - password_hash holds a bcrypt hash; the plain password is never stored
"""

from datetime import datetime

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from meetapp.database import Base
from meetapp.models.types import UTCDateTime, utc_now


class User(Base):
    """A registered person: organizer of meetups and/or subscriber to them."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

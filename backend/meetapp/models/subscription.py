"""
Meetapp Backend: Subscription SQLAlchemy Model
===============================================

What:  ORM model for the `subscriptions` table linking a User to a Meetup.
How:   The (user_id, meetup_id) pair is unique at the database level. The
       same-timestamp and self-subscription rules are enforced by the
       subscription validator before insert.
"""

from datetime import datetime

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from meetapp.database import Base
from meetapp.models.meetup import Meetup
from meetapp.models.types import UTCDateTime, utc_now
from meetapp.models.user import User


class Subscription(Base):
    """A user's registration to attend a meetup."""

    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    meetup_id: Mapped[int] = mapped_column(
        ForeignKey("meetups.id", ondelete="CASCADE"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)

    user: Mapped[User] = relationship(User, lazy="raise")
    meetup: Mapped[Meetup] = relationship(Meetup, lazy="raise")

    __table_args__ = (
        UniqueConstraint("user_id", "meetup_id", name="uq_subscriptions_user_meetup"),
    )

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, user_id={self.user_id}, meetup_id={self.meetup_id})>"

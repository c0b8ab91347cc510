"""
Meetapp Backend: Meetup Service
================================

What:  Meetup listing, detail, create, update and delete, plus the organizer's
       upcoming-meetups view.
Who:   Called by the /meetups and /organizing route handlers.

Business Rules:
    - A meetup cannot be created or moved to a date in the past
    - Only the organizer may update or delete a meetup
    - Past meetups are immutable: no update, no delete
    - A banner_id must reference an uploaded File

Update check order (first failure wins):
    not found (404) → not organizer (403) → new date past (400)
    → meetup already past (400)
"""

import logging
from datetime import date as Day
from datetime import datetime, time, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from meetapp.config import settings
from meetapp.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from meetapp.models.file import File
from meetapp.models.meetup import Meetup
from meetapp.models.subscription import Subscription
from meetapp.models.types import utc_now
from meetapp.models.user import User
from meetapp.schemas.meetup import MeetupCreate, MeetupResponse, MeetupUpdate

logger = logging.getLogger(__name__)


def meetup_query():
    """SELECT Meetup with organizer and banner eagerly loaded."""
    return select(Meetup).options(
        selectinload(Meetup.organizer),
        selectinload(Meetup.banner),
    )


def parse_day(value: str) -> Day:
    """
    Parse the `date` filter of GET /meetups ('YYYY-MM-DD', or a full ISO
    timestamp whose calendar day is used).

    Raises:
        ValidationError: unparseable value
    """
    try:
        return Day.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        raise ValidationError(
            message=f"Invalid date '{value}'. Use ISO 8601 (YYYY-MM-DD).",
            field="date",
        )


class MeetupService:

    async def _load(self, db: AsyncSession, meetup_id: int, refresh: bool = False) -> Optional[Meetup]:
        query = meetup_query().where(Meetup.id == meetup_id)
        if refresh:
            # Reload relationships on an instance already in the identity map
            query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def _check_banner(self, db: AsyncSession, banner_id: Optional[int]) -> None:
        if banner_id is None:
            return
        if await db.get(File, banner_id) is None:
            raise ValidationError(
                message=f"Banner file '{banner_id}' does not exist",
                field="banner_id",
            )

    async def list_meetups(
        self,
        db: AsyncSession,
        page: int = 1,
        day: Optional[str] = None,
    ) -> List[MeetupResponse]:
        """
        One page of meetups ordered by date, optionally limited to one UTC
        calendar day.

        Pagination: `settings.page_size` items, offset (page - 1) * page_size.
        """
        query = meetup_query()

        if day:
            search_day = parse_day(day)
            start = datetime.combine(search_day, time.min, tzinfo=timezone.utc)
            end = datetime.combine(search_day, time.max, tzinfo=timezone.utc)
            query = query.where(Meetup.date.between(start, end))

        query = (
            query.order_by(Meetup.date, Meetup.id)
            .limit(settings.page_size)
            .offset((page - 1) * settings.page_size)
        )

        result = await db.execute(query)
        return [MeetupResponse.model_validate(m) for m in result.scalars().all()]

    async def get_meetup(self, db: AsyncSession, meetup_id: int) -> MeetupResponse:
        meetup = await self._load(db, meetup_id)
        if meetup is None:
            raise NotFoundError(resource="meetup", resource_id=str(meetup_id))
        return MeetupResponse.model_validate(meetup)

    async def create_meetup(self, db: AsyncSession, user: User, data: MeetupCreate) -> MeetupResponse:
        """
        Raises:
            ValidationError: date in the past, unknown banner_id
        """
        if data.date < utc_now():
            raise ValidationError(message="Meetup date invalid.", field="date")

        await self._check_banner(db, data.banner_id)

        meetup = Meetup(
            title=data.title.strip(),
            description=data.description.strip(),
            location=data.location.strip(),
            date=data.date,
            banner_id=data.banner_id,
            user_id=user.id,
        )
        db.add(meetup)
        await db.flush()
        logger.info("Meetup %s created by user %s for %s", meetup.id, user.id, meetup.date.isoformat())

        return MeetupResponse.model_validate(await self._load(db, meetup.id, refresh=True))

    async def update_meetup(
        self,
        db: AsyncSession,
        user: User,
        meetup_id: int,
        data: MeetupUpdate,
    ) -> MeetupResponse:
        """
        Raises:
            NotFoundError, PermissionDeniedError, ValidationError
        """
        meetup = await self._load(db, meetup_id)
        if meetup is None:
            raise NotFoundError(resource="meetup", resource_id=str(meetup_id))

        if meetup.user_id != user.id:
            raise PermissionDeniedError(message="User not authorized.")

        if data.date is not None and data.date < utc_now():
            raise ValidationError(message="Meetup date invalid.", field="date")

        if meetup.past:
            raise ValidationError(message="Can't update past meetups.")

        # banner_id is the only nullable field; null detaches the banner
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field == "banner_id"
        }
        if "banner_id" in changes:
            await self._check_banner(db, changes["banner_id"])

        for field, value in changes.items():
            setattr(meetup, field, value.strip() if isinstance(value, str) else value)

        await db.flush()
        logger.info("Meetup %s updated: %s", meetup.id, ", ".join(sorted(changes)) or "no changes")

        return MeetupResponse.model_validate(await self._load(db, meetup.id, refresh=True))

    async def delete_meetup(self, db: AsyncSession, user: User, meetup_id: int) -> None:
        """
        Removes the meetup and its subscriptions.

        Raises:
            NotFoundError, PermissionDeniedError, ValidationError
        """
        meetup = await db.get(Meetup, meetup_id)
        if meetup is None:
            raise NotFoundError(resource="meetup", resource_id=str(meetup_id))

        if meetup.user_id != user.id:
            raise PermissionDeniedError(message="Not authorized.")

        if meetup.past:
            raise ValidationError(message="Can't delete past meetups.")

        await db.execute(delete(Subscription).where(Subscription.meetup_id == meetup.id))
        await db.delete(meetup)
        await db.flush()
        logger.info("Meetup %s deleted by user %s", meetup_id, user.id)

    async def list_organizing(self, db: AsyncSession, user: User) -> List[MeetupResponse]:
        """The user's own meetups that have not happened yet, soonest first."""
        result = await db.execute(
            meetup_query()
            .where(Meetup.user_id == user.id, Meetup.date > utc_now())
            .order_by(Meetup.date, Meetup.id)
        )
        return [MeetupResponse.model_validate(m) for m in result.scalars().all()]


meetup_service = MeetupService()

"""
Meetapp Backend: Subscription Service
======================================

What:  Lists, creates and cancels a user's meetup subscriptions.
How:   subscribe() gathers the target meetup and the dates of the user's
       current subscriptions, hands them to the subscription validator, writes
       the row and, once committed, schedules the organizer notification as a
       background task that runs after the response is sent.
Who:   Called by the /subscriptions and /meetups/{id}/subscriptions routes.

Subscribe Flow:
    1. Load meetup (+ organizer)             → missing: NotFoundError (404)
    2. Load (meetup_id, date) of user's subs
    3. ensure_can_subscribe()                → SubscriptionRejectedError
    4. INSERT subscription                   → unique violation: time_conflict
    5. COMMIT
    6. background_tasks.add_task(subscription_mail.run)

The mail is scheduled only after the subscription is committed.
"""

import logging
from typing import List, Tuple

from fastapi import BackgroundTasks
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from meetapp.exceptions import NotFoundError, SubscriptionRejectedError, ValidationError
from meetapp.jobs import subscription_mail
from meetapp.models.meetup import Meetup
from meetapp.models.subscription import Subscription
from meetapp.models.types import utc_now
from meetapp.models.user import User
from meetapp.schemas.subscription import SubscriptionResponse, SubscriptionWithMeetup
from meetapp.services.subscription_validator import (
    ConflictReason,
    ExistingSubscription,
    ensure_can_subscribe,
)

logger = logging.getLogger(__name__)


class SubscriptionService:

    async def _existing_subscriptions(self, db: AsyncSession, user_id: int) -> List[ExistingSubscription]:
        result = await db.execute(
            select(Subscription.meetup_id, Meetup.date)
            .join(Meetup, Subscription.meetup_id == Meetup.id)
            .where(Subscription.user_id == user_id)
        )
        return [ExistingSubscription(meetup_id=row.meetup_id, date=row.date) for row in result.all()]

    async def list_subscriptions(
        self,
        db: AsyncSession,
        user: User,
    ) -> Tuple[List[SubscriptionWithMeetup], int]:
        """
        The user's subscriptions to upcoming meetups, soonest meetup first.

        Returns:
            (items, total) where total is sent as X-Total-Count
        """
        upcoming = (Subscription.user_id == user.id, Meetup.date > utc_now())

        total = await db.scalar(
            select(func.count(Subscription.id))
            .join(Meetup, Subscription.meetup_id == Meetup.id)
            .where(*upcoming)
        )

        result = await db.execute(
            select(Subscription)
            .join(Meetup, Subscription.meetup_id == Meetup.id)
            .where(*upcoming)
            .options(
                selectinload(Subscription.meetup).selectinload(Meetup.organizer),
                selectinload(Subscription.meetup).selectinload(Meetup.banner),
            )
            .order_by(Meetup.date, Subscription.id)
        )
        items = [SubscriptionWithMeetup.model_validate(s) for s in result.scalars().all()]
        return items, total or 0

    async def subscribe(
        self,
        db: AsyncSession,
        user: User,
        meetup_id: int,
        background_tasks: BackgroundTasks,
    ) -> SubscriptionResponse:
        """
        Subscribe `user` to a meetup and notify its organizer.

        The notification is added to `background_tasks`, which FastAPI runs
        after the response has been sent.

        Raises:
            NotFoundError: meetup does not exist
            SubscriptionRejectedError: self subscription, past meetup, or
                already subscribed at the same timestamp
        """
        result = await db.execute(
            select(Meetup).options(selectinload(Meetup.organizer)).where(Meetup.id == meetup_id)
        )
        meetup = result.scalar_one_or_none()

        user_id = user.id
        existing = await self._existing_subscriptions(db, user_id)
        ensure_can_subscribe(user_id, meetup, existing)

        subscription = Subscription(user_id=user_id, meetup_id=meetup.id)
        db.add(subscription)
        try:
            await db.flush()
        except IntegrityError:
            # Concurrent duplicate of this (user, meetup) pair
            await db.rollback()
            raise SubscriptionRejectedError(
                reason=ConflictReason.TIME_CONFLICT.value,
                context={"user_id": user_id, "meetup_id": meetup_id},
            )

        response = SubscriptionResponse.model_validate(subscription)
        await db.commit()
        logger.info("User %s subscribed to meetup %s", user.id, meetup.id)

        background_tasks.add_task(
            subscription_mail.run,
            {
                "meetup_title": meetup.title,
                "meetup_date": meetup.date.isoformat(),
                "organizer_name": meetup.organizer.name,
                "organizer_email": meetup.organizer.email,
                "subscriber_name": user.name,
                "subscriber_email": user.email,
            },
        )
        return response

    async def unsubscribe(self, db: AsyncSession, user: User, meetup_id: int) -> None:
        """
        Cancel the user's subscription to a meetup that has not happened yet.

        Raises:
            NotFoundError: meetup missing, or user not subscribed to it
            ValidationError: meetup already past
        """
        meetup = await db.get(Meetup, meetup_id)
        if meetup is None:
            raise NotFoundError(resource="meetup", resource_id=str(meetup_id))

        result = await db.execute(
            select(Subscription).where(
                Subscription.user_id == user.id,
                Subscription.meetup_id == meetup_id,
            )
        )
        subscription = result.scalar_one_or_none()
        if subscription is None:
            raise NotFoundError(resource="subscription")

        if meetup.past:
            raise ValidationError(message="Can't cancel subscription of past meetups.")

        await db.delete(subscription)
        await db.flush()
        logger.info("User %s unsubscribed from meetup %s", user.id, meetup_id)


subscription_service = SubscriptionService()

"""
Meetapp Backend: Subscription Validator
========================================

What:  Decides whether a user may subscribe to a meetup.
How:   Pure function over plain data: the target meetup (or None), the
       subscribing user's id and the timestamps of the meetups the user is
       already subscribed to. No database access, no clock access unless
       `now` is omitted.
Who:   Called by SubscriptionService.subscribe() before anything is written.

Checks (in order, first failure wins):
    1. Meetup exists                                → else NOT_FOUND
    2. Meetup owner is not the user                 → else SELF_SUBSCRIPTION
    3. Meetup date is strictly after `now`          → else MEETUP_PAST
    4. No existing subscription at the exact date   → else TIME_CONFLICT

Timestamp conflicts use exact equality of the scheduled start, not range
overlap. Meetups have no duration.
"""

from datetime import datetime
from enum import Enum
from typing import Iterable, NamedTuple, Optional, Protocol

from meetapp.exceptions import NotFoundError, SubscriptionRejectedError
from meetapp.models.types import as_utc, utc_now


class ConflictReason(str, Enum):
    NOT_FOUND = "not_found"
    SELF_SUBSCRIPTION = "self_subscription"
    MEETUP_PAST = "meetup_past"
    TIME_CONFLICT = "time_conflict"


class ScheduledMeetup(Protocol):
    """Anything with an owner and a date; the Meetup ORM model qualifies."""
    user_id: int
    date: datetime


class ExistingSubscription(NamedTuple):
    """One of the user's current subscriptions, reduced to what matters here."""
    meetup_id: int
    date: datetime


def can_subscribe(
    user_id: int,
    meetup: Optional[ScheduledMeetup],
    existing_subscriptions: Iterable[ExistingSubscription],
    now: Optional[datetime] = None,
) -> Optional[ConflictReason]:
    """
    Return None when the subscription is allowed, else the first ConflictReason.

    Args:
        user_id: The subscribing user.
        meetup: The target meetup, or None when it could not be found.
        existing_subscriptions: The user's subscriptions with their meetup dates.
        now: Reference time; defaults to the current UTC time.
    """
    if meetup is None:
        return ConflictReason.NOT_FOUND

    if meetup.user_id == user_id:
        return ConflictReason.SELF_SUBSCRIPTION

    target = as_utc(meetup.date)
    if target <= as_utc(now or utc_now()):
        return ConflictReason.MEETUP_PAST

    if any(as_utc(existing.date) == target for existing in existing_subscriptions):
        return ConflictReason.TIME_CONFLICT

    return None


def ensure_can_subscribe(
    user_id: int,
    meetup: Optional[ScheduledMeetup],
    existing_subscriptions: Iterable[ExistingSubscription],
    now: Optional[datetime] = None,
) -> None:
    """
    Raising variant of can_subscribe().

    Raises:
        NotFoundError: the meetup does not exist
        SubscriptionRejectedError: any other ConflictReason
    """
    reason = can_subscribe(user_id, meetup, existing_subscriptions, now=now)
    if reason is None:
        return
    if reason is ConflictReason.NOT_FOUND:
        raise NotFoundError(resource="meetup")
    raise SubscriptionRejectedError(reason=reason.value, context={"user_id": user_id})

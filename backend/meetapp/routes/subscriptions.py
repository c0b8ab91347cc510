"""
Meetapp Backend: Subscription Route Handlers
=============================================

What:  List, create and cancel the signed-in user's subscriptions.

Rejections:
    The subscription validator's reasons reach the client as
    {"error": "subscription_rejected", "details": {"reason": ...}}:
        self_subscription, meetup_past → 400
        time_conflict                  → 409
    A missing meetup is a plain 404.
"""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.database import get_db_session
from meetapp.dependencies import get_current_user
from meetapp.models.user import User
from meetapp.schemas.common import ErrorResponse
from meetapp.schemas.subscription import SubscriptionResponse, SubscriptionWithMeetup
from meetapp.services.subscription_service import subscription_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Subscriptions"])


@router.get(
    "/subscriptions",
    response_model=List[SubscriptionWithMeetup],
    summary="My upcoming subscriptions",
    description="Ordered by meetup date. X-Total-Count carries the number of items.",
)
async def list_subscriptions(
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[SubscriptionWithMeetup]:
    items, total = await subscription_service.list_subscriptions(db=db, user=user)
    response.headers["X-Total-Count"] = str(total)
    return items


@router.post(
    "/meetups/{meetup_id}/subscriptions",
    status_code=201,
    response_model=SubscriptionResponse,
    responses={
        400: {"description": "Own meetup, or meetup already happened", "model": ErrorResponse},
        404: {"description": "Meetup not found", "model": ErrorResponse},
        409: {"description": "Already subscribed to a meetup at the same time", "model": ErrorResponse},
    },
    summary="Subscribe to a meetup",
)
async def subscribe(
    meetup_id: int,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SubscriptionResponse:
    """The organizer's notification mail is sent after the response."""
    return await subscription_service.subscribe(
        db=db,
        user=user,
        meetup_id=meetup_id,
        background_tasks=background_tasks,
    )


@router.delete(
    "/meetups/{meetup_id}/subscriptions",
    status_code=204,
    responses={
        400: {"description": "Meetup already happened", "model": ErrorResponse},
        404: {"description": "Meetup or subscription not found", "model": ErrorResponse},
    },
    summary="Cancel a subscription",
)
async def unsubscribe(
    meetup_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await subscription_service.unsubscribe(db=db, user=user, meetup_id=meetup_id)
    return Response(status_code=204)

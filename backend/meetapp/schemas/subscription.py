"""
Meetapp Backend: Subscription Schemas
======================================
"""

from datetime import datetime

from pydantic import BaseModel

from meetapp.schemas.meetup import MeetupResponse


class SubscriptionResponse(BaseModel):
    """Returned by POST /meetups/{id}/subscriptions."""
    id: int
    user_id: int
    meetup_id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class SubscriptionWithMeetup(SubscriptionResponse):
    """Item of GET /subscriptions: the subscription plus its upcoming meetup."""
    meetup: MeetupResponse

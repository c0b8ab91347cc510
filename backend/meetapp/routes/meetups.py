"""
Meetapp Backend: Meetup Route Handlers
=======================================

What:  Meetup listing, detail, create, update and delete.
Who:   Any signed-in user may list and view; only the organizer may change or
       delete, and only while the meetup is in the future.

Listing:
    GET /meetups?page=2&date=2026-11-03
    → 10 meetups per page, ordered by date, limited to that UTC day
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.database import get_db_session
from meetapp.dependencies import get_current_user
from meetapp.models.user import User
from meetapp.schemas.common import ErrorResponse
from meetapp.schemas.meetup import MeetupCreate, MeetupResponse, MeetupUpdate
from meetapp.services.meetup_service import meetup_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meetups", tags=["Meetups"])


@router.get(
    "",
    response_model=List[MeetupResponse],
    responses={400: {"description": "Invalid date filter", "model": ErrorResponse}},
    summary="List meetups",
)
async def list_meetups(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    date: Optional[str] = Query(
        default=None,
        description="Only meetups on this UTC calendar day (YYYY-MM-DD)",
    ),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[MeetupResponse]:
    return await meetup_service.list_meetups(db=db, page=page, day=date)


@router.get(
    "/{meetup_id}",
    response_model=MeetupResponse,
    responses={404: {"description": "Meetup not found", "model": ErrorResponse}},
    summary="Get a single meetup",
)
async def get_meetup(
    meetup_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MeetupResponse:
    return await meetup_service.get_meetup(db=db, meetup_id=meetup_id)


@router.post(
    "",
    status_code=201,
    response_model=MeetupResponse,
    responses={400: {"description": "Past date or unknown banner", "model": ErrorResponse}},
    summary="Create a meetup",
)
async def create_meetup(
    data: MeetupCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MeetupResponse:
    return await meetup_service.create_meetup(db=db, user=user, data=data)


@router.put(
    "/{meetup_id}",
    response_model=MeetupResponse,
    responses={
        400: {"description": "Past date or past meetup", "model": ErrorResponse},
        403: {"description": "Not the organizer", "model": ErrorResponse},
        404: {"description": "Meetup not found", "model": ErrorResponse},
    },
    summary="Update a meetup",
)
async def update_meetup(
    meetup_id: int,
    data: MeetupUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MeetupResponse:
    return await meetup_service.update_meetup(db=db, user=user, meetup_id=meetup_id, data=data)


@router.delete(
    "/{meetup_id}",
    status_code=204,
    responses={
        400: {"description": "Meetup already happened", "model": ErrorResponse},
        403: {"description": "Not the organizer", "model": ErrorResponse},
        404: {"description": "Meetup not found", "model": ErrorResponse},
    },
    summary="Delete a meetup",
)
async def delete_meetup(
    meetup_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await meetup_service.delete_meetup(db=db, user=user, meetup_id=meetup_id)
    return Response(status_code=204)

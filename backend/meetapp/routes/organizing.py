"""
Meetapp Backend: Organizing Route Handler
==========================================

What:  GET /organizing lists the signed-in user's upcoming meetups.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.database import get_db_session
from meetapp.dependencies import get_current_user
from meetapp.models.user import User
from meetapp.schemas.meetup import MeetupResponse
from meetapp.services.meetup_service import meetup_service

router = APIRouter(prefix="/organizing", tags=["Meetups"])


@router.get("", response_model=List[MeetupResponse], summary="Meetups I organize")
async def list_organizing(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[MeetupResponse]:
    return await meetup_service.list_organizing(db=db, user=user)

"""
Meetapp Backend: User Route Handlers
=====================================

What:  Sign-up (POST /users) and profile update (PUT /users).
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.database import get_db_session
from meetapp.dependencies import get_current_user
from meetapp.models.user import User
from meetapp.schemas.common import ErrorResponse
from meetapp.schemas.user import UserCreate, UserResponse, UserUpdate
from meetapp.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    responses={400: {"description": "E-mail already registered", "model": ErrorResponse}},
    summary="Create an account",
)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.create_user(db=db, data=data)


@router.put(
    "",
    response_model=UserResponse,
    responses={
        400: {"description": "E-mail already registered", "model": ErrorResponse},
        401: {"description": "Not signed in, or old password does not match", "model": ErrorResponse},
    },
    summary="Update the signed-in user's profile",
    description=(
        "Partial update of name and e-mail. Changing the password requires "
        "old_password, password and a matching confirm_password."
    ),
)
async def update_user(
    data: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.update_user(db=db, user=user, data=data)

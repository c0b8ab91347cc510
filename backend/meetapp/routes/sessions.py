"""
Meetapp Backend: Session Route Handler
=======================================

What:  POST /sessions exchanges e-mail and password for a Bearer token.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.database import get_db_session
from meetapp.schemas.common import ErrorResponse
from meetapp.schemas.session import SessionCreate, TokenResponse
from meetapp.services.session_service import session_service

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.post(
    "",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Sign in",
)
async def create_session(
    data: SessionCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await session_service.create_session(db=db, data=data)

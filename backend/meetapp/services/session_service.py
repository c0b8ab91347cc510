"""
Meetapp Backend: Session Service
=================================

What:  Exchanges e-mail + password for a signed access token.
How:   Unknown e-mail and wrong password produce the same 401 message so the
       endpoint cannot be used to probe for registered addresses.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.exceptions import AuthenticationError
from meetapp.models.user import User
from meetapp.schemas.session import SessionCreate, TokenResponse
from meetapp.schemas.user import UserResponse
from meetapp.security import create_access_token, verify_password

logger = logging.getLogger(__name__)


class SessionService:

    async def create_session(self, db: AsyncSession, data: SessionCreate) -> TokenResponse:
        result = await db.execute(
            select(User).where(func.lower(User.email) == data.email.lower())
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Failed sign-in attempt for %s", data.email)
            raise AuthenticationError(message="Invalid email or password")

        return TokenResponse(
            access_token=create_access_token(str(user.id)),
            user=UserResponse.model_validate(user),
        )


session_service = SessionService()

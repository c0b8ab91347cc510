"""
Meetapp Backend: Request Dependencies
======================================

What:  FastAPI dependencies shared by routers.
How:   `get_current_user` reads the Bearer token, decodes it and loads the User
       row through the request's session. Any failure is an AuthenticationError
       (401).
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.database import get_db_session
from meetapp.exceptions import AuthenticationError
from meetapp.models.user import User
from meetapp.security import decode_access_token

security = HTTPBearer(auto_error=False)


async def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    if creds is None:
        raise AuthenticationError(message="Token not provided")

    user_id = decode_access_token(creds.credentials)

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError(message="User no longer exists")
    return user

"""
Meetapp Backend: Password Hashing and Session Tokens
=====================================================

What:  bcrypt password hashing (passlib) and JWT session tokens (python-jose).
Who:   UserService (hashing on sign-up / password change), SessionService
       (verification, token issue) and the auth dependency (token decode).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from meetapp.config import settings
from meetapp.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only uses the first 72 bytes of input
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not password or len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        return False
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # Malformed stored hash
        logger.warning("Password verification failed on malformed hash")
        return False


def create_access_token(subject: str, expires_minutes: Optional[int] = None) -> str:
    """Issue a signed token whose `sub` claim is the user id."""
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> int:
    """
    Return the user id carried by a token.

    Raises:
        AuthenticationError: bad signature, expired token, or missing/non-numeric `sub`
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        sub = payload.get("sub")
        if not sub:
            raise AuthenticationError(message="Invalid token")
        return int(sub)
    except (JWTError, ValueError):
        raise AuthenticationError(message="Invalid or expired token")

"""
Meetapp Backend: User Service
==============================

What:  Sign-up and profile update rules.
Who:   Called by the /users route handlers.

Rules:
    - E-mail addresses are unique (case-insensitive, stored lowercase)
    - Passwords are stored as bcrypt hashes only
    - Changing the password requires the current password
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from meetapp.exceptions import AuthenticationError, ValidationError
from meetapp.models.user import User
from meetapp.schemas.user import UserCreate, UserResponse, UserUpdate
from meetapp.security import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """Stateless; every method receives the request's session."""

    async def _email_taken(self, db: AsyncSession, email: str) -> bool:
        result = await db.execute(
            select(User.id).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none() is not None

    async def create_user(self, db: AsyncSession, data: UserCreate) -> UserResponse:
        """
        Register a new user.

        Raises:
            ValidationError: the e-mail is already registered
        """
        email = data.email.lower()
        if await self._email_taken(db, email):
            raise ValidationError(message="User already exists", field="email")

        user = User(
            name=data.name.strip(),
            email=email,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        await db.flush()
        logger.info("User created: %s", user.id)

        return UserResponse.model_validate(user)

    async def update_user(self, db: AsyncSession, user: User, data: UserUpdate) -> UserResponse:
        """
        Update the authenticated user's profile.

        Raises:
            ValidationError: new e-mail belongs to another user
            AuthenticationError: old_password does not match
        """
        if data.email is not None:
            email = data.email.lower()
            if email != user.email and await self._email_taken(db, email):
                raise ValidationError(message="User already exists", field="email")
            user.email = email

        if data.password is not None:
            if not verify_password(data.old_password or "", user.password_hash):
                raise AuthenticationError(message="Password does not match")
            user.password_hash = hash_password(data.password)

        if data.name is not None:
            user.name = data.name.strip()

        await db.flush()
        logger.info("User updated: %s", user.id)

        return UserResponse.model_validate(user)


user_service = UserService()

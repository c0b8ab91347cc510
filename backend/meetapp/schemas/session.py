"""
Meetapp Backend: Session Schemas
=================================

What:  Sign-in request and token response.
"""

from pydantic import BaseModel, EmailStr, Field

from meetapp.schemas.user import UserResponse


class SessionCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """Returned by POST /sessions. Send `access_token` as a Bearer token."""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

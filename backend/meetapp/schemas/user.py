"""
Meetapp Backend: User Schemas
==============================

What:  Sign-up, profile update and public user representations.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from meetapp.security import BCRYPT_MAX_BYTES

PASSWORD_MIN_LENGTH = 6


def validate_password_bytes(value: Optional[str]) -> Optional[str]:
    """
    bcrypt reads at most 72 bytes, so the limit applies to the UTF-8
    encoding rather than the character count.
    """
    if value is not None and len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"password must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
    return value


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, v):
        return validate_password_bytes(v)


class UserUpdate(BaseModel):
    """
    Partial profile update.

    A password change needs the current password plus a matching
    confirmation; name and email can change on their own.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    old_password: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=PASSWORD_MIN_LENGTH)
    confirm_password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, v):
        return validate_password_bytes(v)

    @model_validator(mode="after")
    def check_password_change(self) -> "UserUpdate":
        if self.password is not None:
            if not self.old_password:
                raise ValueError("old_password is required to set a new password")
            if self.confirm_password != self.password:
                raise ValueError("confirm_password does not match password")
        return self


class UserResponse(BaseModel):
    id: int
    name: str
    email: EmailStr

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Organizer details embedded in meetup payloads."""
    name: str
    email: str

    model_config = {"from_attributes": True}

"""Request/response schemas for registration, login and the authenticated identity."""

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)

# Deliberately loose: one @, no whitespace, a dot in the domain part.
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    """Strip and lower-case an email address; emails are unique case-insensitively."""
    return value.strip().lower()


class RegisterRequest(BaseModel):
    """Self-registration payload. 'admin' is rejected before this model is validated."""

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: str = Field(..., max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: Literal["employer", "standard"] = "standard"
    state: str | None = Field(default=None, max_length=64)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = normalize_email(v)
        if not EMAIL_PATTERN.match(v):
            raise ValueError("email must be a valid email address")
        return v


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class PublicUser(BaseModel):
    """User projection safe to return to clients (never includes the password hash)."""

    id: int
    name: str
    email: str
    role: str
    state: str | None = None
    active: bool
    profile_picture: str | None = Field(default=None, alias="profilePicture")

    class Config:
        from_attributes = True
        populate_by_name = True


class LoginResponse(BaseModel):
    """Session token plus the public user projection."""

    token: str = Field(..., description="JWT session token; send as 'Authorization: Bearer <token>'")
    user: PublicUser


class Identity(BaseModel):
    """Authenticated caller resolved from the session token claims."""

    id: int
    role: str
    name: str


class MessageResponse(BaseModel):
    message: str

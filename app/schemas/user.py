"""
Pydantic schemas for the /users endpoints.

These are the wire-level contracts. Pydantic rejects malformed bodies with a
422 before any service code runs; the User entity then applies the stricter
domain rules (username shape, name characters) on top.

Notice that no response schema has a password field: responses are always
built from User.to_dto(), which never includes the hash.
"""

import re
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.domain.user import Role


# (pattern, message) pairs checked against signup passwords
PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "must contain uppercase"),
    (re.compile(r"[a-z]"), "must contain lowercase"),
    (re.compile(r"[0-9]"), "must contain digit"),
    (re.compile(r"[^A-Za-z0-9]"), "must contain special character"),
)


def _normalize_username(value: str) -> str:
    return value.strip().lower()


def _reject_nul(value: str) -> str:
    # bcrypt cannot hash a NUL byte
    if "\x00" in value:
        raise ValueError("must not contain NUL characters")
    return value


class LoginRequest(BaseModel):
    """Request body for POST /users/login."""
    username: str = Field(min_length=3, max_length=50, description="Case-insensitive username")
    password: str

    @field_validator("username")
    @classmethod
    def normalize_username(cls, value: str) -> str:
        return _normalize_username(value)

    @field_validator("password")
    @classmethod
    def password_has_no_nul(cls, value: str) -> str:
        return _reject_nul(value)


class SignupRequest(BaseModel):
    """Request body for POST /users/signup."""
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    # Accepted but ignored: every signup is stored with role "user"
    role: Role = Role.USER

    @field_validator("username")
    @classmethod
    def normalize_username(cls, value: str) -> str:
        return _normalize_username(value)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        _reject_nul(value)
        failures = [message for pattern, message in PASSWORD_RULES if not pattern.search(value)]
        if failures:
            raise ValueError(", ".join(failures))
        return value

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()


class UserResponse(BaseModel):
    """Public representation of a User (never includes the password hash)."""
    id: int | None
    username: str
    first_name: str
    last_name: str
    email: str
    role: Role
    created_at: datetime | None
    updated_at: datetime | None


class AuthenticationResponse(BaseModel):
    """Response body for a successful login."""
    message: str = "Authentication successful"
    token: str
    token_type: str = "bearer"
    username: str
    fullname: str
    role: Role

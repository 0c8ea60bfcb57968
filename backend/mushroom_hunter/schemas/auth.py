"""
Mushroom Hunter Backend — Auth Schemas
========================================

What:  Request/response contracts for /api/auth.
How:   Field constraints mirror the registration form: valid email,
       username of 3-30 characters after trimming, password of at least
       6 characters. Emails are normalized to lower case before lookup.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    email: EmailStr = Field(description="Login email (stored lower-cased)")
    username: str = Field(min_length=3, max_length=30, description="Public display name")
    password: str = Field(min_length=6, max_length=128, description="Plain password (min 6 chars)")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("username", mode="before")
    @classmethod
    def trim_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(BaseModel):
    """Public view of a user; the password hash is never serialized."""
    id: uuid.UUID
    email: str
    username: str
    role: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    user: UserResponse
    token: str = Field(description="Bearer access token (JWT)")


class CurrentUserResponse(BaseModel):
    user: UserResponse

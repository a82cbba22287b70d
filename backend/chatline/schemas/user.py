# backend/chatline/schemas/user.py
"""
Pydantic schemas for the user endpoints.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.config import settings
from ._strict_base import StrictRequestModel


class LoginRequest(StrictRequestModel):
    """Credentials for login-or-register."""

    username: str = Field(..., min_length=3, description="Unique login name")
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def _check_username_length(cls, value: str) -> str:
        if len(value) > settings.username_max_length:
            raise ValueError(
                f"Username must be at most {settings.username_max_length} characters"
            )
        return value

    @field_validator("password")
    @classmethod
    def _check_password_length(cls, value: str) -> str:
        if len(value) < settings.password_min_length:
            raise ValueError(
                f"Password must be at least {settings.password_min_length} characters"
            )
        return value


class UserSummary(BaseModel):
    """Public user info."""

    id: str
    username: str
    profile_picture_key: str

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Response for POST /users/login."""

    user_id: str
    user: UserSummary
    access_token: str
    token_type: str = "bearer"
    is_new_user: bool


class UserListResponse(BaseModel):
    """Response for GET /users/all and GET /users/online."""

    users: List[UserSummary] = Field(default_factory=list)

"""Pydantic schemas for User."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import CamelModel


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8)
    display_name: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=500)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenRefresh(CamelModel):
    refresh_token: str


class UserSummary(CamelModel):
    """Compact user shape embedded in likes, comments, follows and shares."""
    id: UUID
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None


class UserResponse(UserSummary):
    email: str | None = None  # Only in own profile
    location: str | None = None
    website: str | None = None
    is_private: bool = False
    followers_count: int = 0
    following_count: int = 0
    recommendations_count: int = 0
    likes_received_count: int = 0
    created_at: datetime


class Token(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse

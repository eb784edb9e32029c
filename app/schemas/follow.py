"""Pydantic schemas for Follow."""
from datetime import datetime
from uuid import UUID

from app.models.enums import FollowStatus
from app.schemas.common import CamelModel, Pagination
from app.schemas.user import UserSummary


class FollowToggleRequest(CamelModel):
    following_id: UUID


class FollowToggleResponse(CamelModel):
    success: bool = True
    following: bool
    followers_count: int
    following_count: int
    message: str


class FollowResponse(CamelModel):
    follower_id: UUID
    following_id: UUID
    status: FollowStatus
    notifications_enabled: bool = True
    created_at: datetime
    follower: UserSummary | None = None
    following: UserSummary | None = None


class FollowersResponse(CamelModel):
    success: bool = True
    followers: list[FollowResponse]
    pagination: Pagination


class FollowingResponse(CamelModel):
    success: bool = True
    following: list[FollowResponse]
    pagination: Pagination


class FollowActivityResponse(CamelModel):
    success: bool = True
    activity: list[FollowResponse]
    pagination: Pagination


class SuggestedFollow(CamelModel):
    user: UserSummary
    mutual_followers_count: int


class SuggestedFollowsResponse(CamelModel):
    success: bool = True
    suggestions: list[SuggestedFollow]


class MutualFollowersResponse(CamelModel):
    success: bool = True
    users: list[UserSummary]


class FollowStatsResponse(CamelModel):
    followers_count: int = 0
    following_count: int = 0


class FollowStatusResponse(CamelModel):
    following: bool

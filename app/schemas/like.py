"""Pydantic schemas for Like."""
from datetime import datetime
from uuid import UUID

from app.models.enums import TargetType
from app.schemas.common import CamelModel, Pagination
from app.schemas.user import UserSummary


class LikeToggleRequest(CamelModel):
    target_type: TargetType
    target_id: UUID


class LikeToggleResponse(CamelModel):
    success: bool = True
    liked: bool
    like_count: int
    message: str


class LikeStatusResponse(CamelModel):
    liked: bool
    like_count: int


class LikeResponse(CamelModel):
    id: UUID
    user_id: UUID
    target_type: TargetType
    target_id: UUID
    created_at: datetime
    user: UserSummary | None = None
    target: dict | None = None


class LikersResponse(CamelModel):
    success: bool = True
    likes: list[LikeResponse]
    like_count: int


class UserLikesResponse(CamelModel):
    success: bool = True
    likes: list[LikeResponse]
    pagination: Pagination


class LikeStatsResponse(CamelModel):
    recommendation: int = 0
    comment: int = 0
    review: int = 0
    total: int = 0

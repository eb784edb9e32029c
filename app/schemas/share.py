"""Pydantic schemas for Share."""
from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.models.enums import SharePlatform, ShareType, TargetType
from app.schemas.common import CamelModel, Pagination
from app.schemas.user import UserSummary


class ShareCreate(CamelModel):
    target_type: TargetType
    target_id: UUID
    share_type: ShareType = ShareType.INTERNAL
    platform: SharePlatform | None = None
    message: str | None = Field(None, max_length=500)
    shared_with_users: list[UUID] = Field(default_factory=list)


class ShareResponse(CamelModel):
    id: UUID
    user_id: UUID
    target_type: TargetType
    target_id: UUID
    share_type: ShareType
    platform: SharePlatform | None = None
    message: str | None = None
    shared_with_users: list[UUID] = Field(default_factory=list)
    click_count: int = 0
    created_at: datetime
    user: UserSummary | None = None
    target: dict | None = None


class ShareCreateResponse(CamelModel):
    success: bool = True
    message: str = "Content shared successfully"
    share: ShareResponse
    share_url: str
    share_text: str


class ShareClickResponse(CamelModel):
    success: bool = True
    click_count: int


class PlatformStats(CamelModel):
    platform: SharePlatform | None = None
    count: int
    clicks: int


class ShareStats(CamelModel):
    total_shares: int = 0
    total_clicks: int = 0
    platforms: list[PlatformStats] = Field(default_factory=list)


class TargetSharesResponse(CamelModel):
    success: bool = True
    shares: list[ShareResponse]
    share_stats: ShareStats
    pagination: Pagination


class ShareListResponse(CamelModel):
    success: bool = True
    shares: list[ShareResponse]
    pagination: Pagination


class TrendingShare(CamelModel):
    target_type: TargetType
    target_id: UUID
    share_count: int
    total_clicks: int
    trending_score: int
    last_shared_at: datetime
    target: dict | None = None


class TrendingSharesResponse(CamelModel):
    success: bool = True
    trending: list[TrendingShare]

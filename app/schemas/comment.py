"""Pydantic schemas for Comment."""
from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from app.models.enums import TargetType
from app.schemas.common import CamelModel, Pagination
from app.schemas.user import UserSummary

COMMENT_MAX_LENGTH = 1000


class CommentCreate(CamelModel):
    target_type: TargetType
    target_id: UUID
    text: str = Field(..., max_length=5000)
    parent_comment_id: UUID | None = None

    @field_validator("text")
    @classmethod
    def text_length(cls, value: str) -> str:
        value = value.strip()
        if not 1 <= len(value) <= COMMENT_MAX_LENGTH:
            raise ValueError(f"Comment must be between 1 and {COMMENT_MAX_LENGTH} characters")
        return value


class CommentReport(CamelModel):
    reason: str | None = Field(None, max_length=500)


class CommentResponse(CamelModel):
    id: UUID
    user_id: UUID
    target_type: TargetType
    target_id: UUID
    text: str
    parent_comment_id: UUID | None = None
    reply_count: int = 0
    like_count: int = 0
    is_public: bool = True
    is_moderated: bool = False
    created_at: datetime
    updated_at: datetime | None = None
    user: UserSummary | None = None


class CommentListResponse(CamelModel):
    success: bool = True
    comments: list[CommentResponse]
    pagination: Pagination


class ReplyListResponse(CamelModel):
    success: bool = True
    replies: list[CommentResponse]
    pagination: Pagination


class CommentReportResponse(CamelModel):
    success: bool = True
    report_count: int
    is_moderated: bool


class CommentStatsResponse(CamelModel):
    total_comments: int = 0
    total_likes: int = 0

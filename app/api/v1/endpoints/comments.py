"""Comment endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_current_user, get_comment_service
from app.models.user import User
from app.schemas.comment import (
    CommentCreate,
    CommentListResponse,
    CommentReport,
    CommentReportResponse,
    CommentResponse,
    CommentStatsResponse,
    ReplyListResponse,
)
from app.schemas.common import MessageResponse, Pagination
from app.services.comment_service import CommentService, comment_to_response

router = APIRouter(prefix="/social", tags=["comments"])


@router.post("/comment", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    comment = await service.add_comment(
        current_user.id,
        data.target_type,
        data.target_id,
        data.text,
        parent_id=data.parent_comment_id,
    )
    await service.db.commit()
    return comment_to_response(comment)


# Registered before /comments/{target_type}/{target_id} so "replies" is not read as an id
@router.get("/comments/{comment_id}/replies", response_model=ReplyListResponse)
async def get_comment_replies(
    comment_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    service: CommentService = Depends(get_comment_service),
):
    replies, total = await service.get_comment_replies(comment_id, page=page, limit=limit)
    return ReplyListResponse(
        replies=[comment_to_response(c) for c in replies],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/comments/{target_type}/{target_id}", response_model=CommentListResponse)
async def get_target_comments(
    target_type: str,
    target_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    include_replies: bool = Query(False, alias="includeReplies"),
    service: CommentService = Depends(get_comment_service),
):
    comments, total = await service.get_target_comments(
        target_type,
        target_id,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        include_replies=include_replies,
    )
    return CommentListResponse(
        comments=[comment_to_response(c) for c in comments],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/comments/{comment_id}/report", response_model=CommentReportResponse)
async def report_comment(
    comment_id: UUID,
    data: CommentReport | None = None,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    comment = await service.report_comment(comment_id, data.reason if data else None)
    await service.db.commit()
    return CommentReportResponse(report_count=comment.report_count, is_moderated=comment.is_moderated)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: UUID,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    await service.delete_comment(comment_id, current_user.id)
    await service.db.commit()
    return MessageResponse(message="Comment deleted successfully")


@router.get("/comment-stats/{target_type}/{target_id}", response_model=CommentStatsResponse)
async def get_comment_stats(
    target_type: str,
    target_id: UUID,
    service: CommentService = Depends(get_comment_service),
):
    return CommentStatsResponse(**await service.get_comment_stats(target_type, target_id))


@router.get("/user-comments", response_model=CommentListResponse)
async def get_user_comments(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    comments, total = await service.get_user_comments(current_user.id, page=page, limit=limit)
    return CommentListResponse(
        comments=[comment_to_response(c) for c in comments],
        pagination=Pagination.build(page, limit, total),
    )

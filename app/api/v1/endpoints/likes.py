"""Like endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user, get_like_service
from app.models.enums import LIKE_TARGETS, TargetType
from app.models.user import User
from app.schemas.common import Pagination
from app.schemas.like import (
    LikersResponse,
    LikeStatsResponse,
    LikeStatusResponse,
    LikeToggleRequest,
    LikeToggleResponse,
    UserLikesResponse,
)
from app.services.like_service import LikeService, like_to_response
from app.services.targets import check_target_type, describe_targets

router = APIRouter(prefix="/social", tags=["likes"])


@router.post("/like", response_model=LikeToggleResponse)
async def toggle_like(
    data: LikeToggleRequest,
    current_user: User = Depends(get_current_user),
    service: LikeService = Depends(get_like_service),
):
    user_id = current_user.id
    result = await service.toggle_like(user_id, data.target_type, data.target_id)
    await service.db.commit()
    return LikeToggleResponse(
        liked=result.liked,
        like_count=result.like_count,
        message="Liked successfully" if result.liked else "Unliked successfully",
    )


@router.get("/likes/{target_type}/{target_id}", response_model=LikersResponse)
async def get_likers(
    target_type: str,
    target_id: UUID,
    limit: int = Query(10, ge=1, le=50),
    service: LikeService = Depends(get_like_service),
):
    likes = await service.get_likers(target_type, target_id, limit=limit)
    like_count = await service.get_like_count(TargetType(target_type), target_id)
    return LikersResponse(likes=[like_to_response(like) for like in likes], like_count=like_count)


@router.get("/like-status/{target_type}/{target_id}", response_model=LikeStatusResponse)
async def get_like_status(
    target_type: str,
    target_id: UUID,
    current_user: User = Depends(get_current_user),
    service: LikeService = Depends(get_like_service),
):
    kind = check_target_type(target_type, LIKE_TARGETS)
    return LikeStatusResponse(
        liked=await service.is_liked_by_user(current_user.id, kind, target_id),
        like_count=await service.get_like_count(kind, target_id),
    )


@router.get("/user-likes", response_model=UserLikesResponse)
async def get_user_likes(
    target_type: str | None = Query(None, alias="targetType"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    service: LikeService = Depends(get_like_service),
):
    likes, total = await service.get_user_likes(current_user.id, target_type, page=page, limit=limit)
    targets = await describe_targets(service.db, [(TargetType(like.target_type), like.target_id) for like in likes])
    return UserLikesResponse(
        likes=[like_to_response(like, targets.get((TargetType(like.target_type), like.target_id))) for like in likes],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/user-like-stats", response_model=LikeStatsResponse)
async def get_user_like_stats(
    current_user: User = Depends(get_current_user),
    service: LikeService = Depends(get_like_service),
):
    return LikeStatsResponse(**await service.get_user_like_stats(current_user.id))

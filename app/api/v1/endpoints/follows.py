"""Follow endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user, get_follow_service
from app.models.user import User
from app.schemas.common import Pagination
from app.schemas.follow import (
    FollowActivityResponse,
    FollowersResponse,
    FollowingResponse,
    FollowStatsResponse,
    FollowStatusResponse,
    FollowToggleRequest,
    FollowToggleResponse,
    MutualFollowersResponse,
    SuggestedFollow,
    SuggestedFollowsResponse,
)
from app.schemas.user import UserSummary
from app.services.follow_service import FollowService, follow_to_response

router = APIRouter(prefix="/social", tags=["follows"])


@router.post("/follow", response_model=FollowToggleResponse)
async def toggle_follow(
    data: FollowToggleRequest,
    current_user: User = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    follower_id = current_user.id
    result = await service.toggle_follow(follower_id, data.following_id)
    await service.db.commit()
    return FollowToggleResponse(
        following=result.following,
        followers_count=result.followers_count,
        following_count=result.following_count,
        message="Followed successfully" if result.following else "Unfollowed successfully",
    )


@router.get("/followers/{user_id}", response_model=FollowersResponse)
async def get_followers(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    service: FollowService = Depends(get_follow_service),
):
    follows, total = await service.get_followers(user_id, page=page, limit=limit)
    return FollowersResponse(
        followers=[follow_to_response(f) for f in follows],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/following/{user_id}", response_model=FollowingResponse)
async def get_following(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    service: FollowService = Depends(get_follow_service),
):
    follows, total = await service.get_following(user_id, page=page, limit=limit)
    return FollowingResponse(
        following=[follow_to_response(f) for f in follows],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/suggested-follows", response_model=SuggestedFollowsResponse)
async def get_suggested_follows(
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    suggestions = await service.get_suggested_follows(current_user.id, limit=limit)
    return SuggestedFollowsResponse(
        suggestions=[
            SuggestedFollow(user=UserSummary.model_validate(user), mutual_followers_count=count)
            for user, count in suggestions
        ]
    )


@router.get("/mutual-followers/{user_id}", response_model=MutualFollowersResponse)
async def get_mutual_followers(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    users = await service.get_mutual_followers(current_user.id, user_id)
    return MutualFollowersResponse(users=[UserSummary.model_validate(u) for u in users])


@router.get("/follow-stats/{user_id}", response_model=FollowStatsResponse)
async def get_follow_stats(
    user_id: UUID,
    service: FollowService = Depends(get_follow_service),
):
    return FollowStatsResponse(**await service.get_follow_stats(user_id))


@router.get("/follow-status/{user_id}", response_model=FollowStatusResponse)
async def get_follow_status(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    return FollowStatusResponse(following=await service.is_following(current_user.id, user_id))


@router.get("/follow-activity", response_model=FollowActivityResponse)
async def get_follow_activity(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    follows, total = await service.get_follow_activity(current_user.id, page=page, limit=limit)
    return FollowActivityResponse(
        activity=[follow_to_response(f) for f in follows],
        pagination=Pagination.build(page, limit, total),
    )

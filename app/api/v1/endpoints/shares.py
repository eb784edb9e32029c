"""Share endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_current_user, get_share_service
from app.models.engagement import Share
from app.models.enums import ShareType, TargetType
from app.models.user import User
from app.schemas.common import Pagination
from app.schemas.share import (
    ShareClickResponse,
    ShareCreate,
    ShareCreateResponse,
    ShareListResponse,
    ShareStats,
    TargetSharesResponse,
    TrendingShare,
    TrendingSharesResponse,
)
from app.services.share_service import ShareService, share_to_response
from app.services.targets import describe_targets

router = APIRouter(prefix="/social", tags=["shares"])


async def _with_targets(service: ShareService, shares: list[Share]) -> list:
    targets = await describe_targets(service.db, [(TargetType(s.target_type), s.target_id) for s in shares])
    return [share_to_response(s, targets.get((TargetType(s.target_type), s.target_id))) for s in shares]


@router.post("/share", response_model=ShareCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_share(
    data: ShareCreate,
    current_user: User = Depends(get_current_user),
    service: ShareService = Depends(get_share_service),
):
    result = await service.create_share(
        current_user.id,
        data.target_type,
        data.target_id,
        share_type=data.share_type,
        platform=data.platform,
        message=data.message,
        shared_with_users=data.shared_with_users,
    )
    await service.db.commit()
    return ShareCreateResponse(
        share=share_to_response(result.share),
        share_url=result.share_url,
        share_text=result.share_text,
    )


# Registered before /shares/{target_type}/{target_id}
@router.post("/shares/{share_id}/click", response_model=ShareClickResponse)
async def track_click(
    share_id: UUID,
    service: ShareService = Depends(get_share_service),
):
    click_count = await service.track_click(share_id)
    await service.db.commit()
    return ShareClickResponse(click_count=click_count)


@router.get("/shares/{target_type}/{target_id}", response_model=TargetSharesResponse)
async def get_target_shares(
    target_type: str,
    target_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    share_type: ShareType | None = Query(None, alias="shareType"),
    service: ShareService = Depends(get_share_service),
):
    shares, total = await service.get_target_shares(
        target_type, target_id, page=page, limit=limit, share_type=share_type
    )
    stats = await service.get_share_stats(target_type, target_id)
    return TargetSharesResponse(
        shares=[share_to_response(s) for s in shares],
        share_stats=ShareStats(**stats),
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/user-shares", response_model=ShareListResponse)
async def get_user_shares(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    share_type: ShareType | None = Query(None, alias="shareType"),
    current_user: User = Depends(get_current_user),
    service: ShareService = Depends(get_share_service),
):
    shares, total = await service.get_user_shares(current_user.id, page=page, limit=limit, share_type=share_type)
    return ShareListResponse(
        shares=await _with_targets(service, shares),
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/received-shares", response_model=ShareListResponse)
async def get_received_shares(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    service: ShareService = Depends(get_share_service),
):
    shares, total = await service.get_received_shares(current_user.id, page=page, limit=limit)
    return ShareListResponse(
        shares=await _with_targets(service, shares),
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/trending-shares", response_model=TrendingSharesResponse)
async def get_trending_shares(
    timeframe: int = Query(7, ge=1, le=365),
    limit: int = Query(20, ge=1, le=50),
    target_type: str | None = Query(None, alias="targetType"),
    service: ShareService = Depends(get_share_service),
):
    trending = await service.get_trending_shares(timeframe_days=timeframe, limit=limit, target_type=target_type)
    return TrendingSharesResponse(trending=[TrendingShare(**t) for t in trending])

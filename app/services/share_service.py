"""Share recording, click tracking and share analytics."""
import logging
from dataclasses import dataclass
from datetime import timedelta
from uuid import UUID

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.db.session import utcnow
from app.models.engagement import Share, ShareRecipient
from app.models.enums import EXTERNAL_PLATFORMS, SHARE_TARGETS, SharePlatform, ShareType, TargetType
from app.models.user import User
from app.schemas.share import ShareResponse
from app.schemas.user import UserSummary
from app.services import counters
from app.services.targets import check_target_type, describe_targets, require_target

logger = logging.getLogger(__name__)

SHARE_MESSAGE_MAX_LENGTH = 500

DEFAULT_SHARE_TEXT = {
    TargetType.RECOMMENDATION: "Check out this amazing book recommendation!",
    TargetType.REVIEW: "Read this insightful book review!",
    TargetType.BOOK: "Discover this great book!",
}


@dataclass
class ShareResult:
    share: Share
    share_url: str
    share_text: str


def share_to_response(share: Share, target: dict | None = None) -> ShareResponse:
    """Build API response from a Share (user and recipients must be loaded)."""
    return ShareResponse(
        id=share.id,
        user_id=share.user_id,
        target_type=share.target_type,
        target_id=share.target_id,
        share_type=share.share_type,
        platform=share.platform,
        message=share.message,
        shared_with_users=[r.user_id for r in share.recipients],
        click_count=share.click_count or 0,
        created_at=share.created_at,
        user=UserSummary.model_validate(share.user) if share.user else None,
        target=target,
    )


def generate_share_url(target_type: TargetType, target_id: UUID, base_url: str | None = None) -> str:
    base = (base_url or settings.SHARE_BASE_URL).rstrip("/")
    return f"{base}/{target_type.value}/{target_id}"


def generate_share_text(target_type: TargetType, message: str | None = None) -> str:
    if message:
        return message
    return DEFAULT_SHARE_TEXT.get(target_type, "Check this out!")


def _share_options():
    return (selectinload(Share.user), selectinload(Share.recipients))


class ShareService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_share(
        self,
        user_id: UUID,
        target_type: TargetType | str,
        target_id: UUID,
        share_type: ShareType | str = ShareType.INTERNAL,
        platform: SharePlatform | str | None = None,
        message: str | None = None,
        shared_with_users=(),
    ) -> ShareResult:
        """Record one share action. Every call inserts a new row."""
        target_type = check_target_type(target_type, SHARE_TARGETS)
        try:
            share_type = ShareType(share_type)
        except ValueError:
            raise ValidationError("Invalid share type", field="shareType") from None
        if platform is not None:
            try:
                platform = SharePlatform(platform)
            except ValueError:
                raise ValidationError("Invalid platform", field="platform") from None

        if share_type == ShareType.EXTERNAL and platform not in EXTERNAL_PLATFORMS:
            raise ValidationError("External shares require a supported platform", field="platform")

        message = (message or "").strip() or None
        if message and len(message) > SHARE_MESSAGE_MAX_LENGTH:
            raise ValidationError(
                f"Message cannot exceed {SHARE_MESSAGE_MAX_LENGTH} characters", field="message"
            )

        recipients = list(dict.fromkeys(shared_with_users or ()))
        if recipients and share_type != ShareType.INTERNAL:
            raise ValidationError("Only internal shares can name recipients", field="sharedWithUsers")
        if recipients:
            found = await self.db.execute(select(User.id).where(User.id.in_(recipients)))
            missing = set(recipients) - set(found.scalars().all())
            if missing:
                raise ValidationError("Some recipients do not exist", field="sharedWithUsers")

        await require_target(self.db, target_type, target_id)

        share = Share(
            user_id=user_id,
            target_type=target_type,
            target_id=target_id,
            share_type=share_type,
            platform=platform,
            message=message,
            recipients=[ShareRecipient(user_id=r) for r in recipients],
        )
        self.db.add(share)
        await self.db.flush()
        await counters.recompute_share_count(self.db, target_type, target_id)
        logger.info(
            "User %s shared %s %s (%s%s)",
            user_id,
            target_type.value,
            target_id,
            share_type.value,
            f"/{platform.value}" if platform else "",
        )

        share = await self.get_share(share.id)
        return ShareResult(
            share=share,
            share_url=generate_share_url(target_type, target_id),
            share_text=generate_share_text(target_type, message),
        )

    async def get_share(self, share_id: UUID) -> Share | None:
        result = await self.db.execute(
            select(Share)
            .where(Share.id == share_id)
            .options(*_share_options())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def track_click(self, share_id: UUID) -> int:
        """Count one click-through on a share and return the new tally."""
        result = await self.db.execute(
            update(Share)
            .where(Share.id == share_id)
            .values(click_count=Share.click_count + 1)
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            raise NotFoundError("Share not found")
        return await self.db.scalar(select(Share.click_count).where(Share.id == share_id))

    async def _page(self, conditions: list, page: int, limit: int) -> tuple[list[Share], int]:
        total = await self.db.scalar(select(func.count(Share.id)).where(*conditions)) or 0
        result = await self.db.execute(
            select(Share)
            .where(*conditions)
            .order_by(desc(Share.created_at))
            .offset((page - 1) * limit)
            .limit(limit)
            .options(*_share_options())
        )
        return list(result.scalars().all()), total

    async def get_target_shares(
        self,
        target_type: TargetType | str,
        target_id: UUID,
        *,
        page: int = 1,
        limit: int = 20,
        share_type: ShareType | None = None,
    ) -> tuple[list[Share], int]:
        target_type = check_target_type(target_type, SHARE_TARGETS)
        conditions = [
            Share.target_type == target_type,
            Share.target_id == target_id,
            Share.is_public.is_(True),
        ]
        if share_type is not None:
            conditions.append(Share.share_type == share_type)
        return await self._page(conditions, page, limit)

    async def get_share_stats(self, target_type: TargetType | str, target_id: UUID) -> dict:
        """Share totals for a target with a per-platform breakdown."""
        target_type = check_target_type(target_type, SHARE_TARGETS)
        result = await self.db.execute(
            select(Share.platform, func.count(Share.id), func.coalesce(func.sum(Share.click_count), 0))
            .where(Share.target_type == target_type, Share.target_id == target_id)
            .group_by(Share.platform)
            .order_by(desc(func.count(Share.id)))
        )
        platforms = [
            {"platform": platform, "count": count, "clicks": int(clicks)}
            for platform, count, clicks in result.all()
        ]
        return {
            "total_shares": sum(p["count"] for p in platforms),
            "total_clicks": sum(p["clicks"] for p in platforms),
            "platforms": platforms,
        }

    async def get_user_shares(
        self,
        user_id: UUID,
        *,
        page: int = 1,
        limit: int = 20,
        share_type: ShareType | None = None,
    ) -> tuple[list[Share], int]:
        conditions = [Share.user_id == user_id]
        if share_type is not None:
            conditions.append(Share.share_type == share_type)
        return await self._page(conditions, page, limit)

    async def get_received_shares(self, user_id: UUID, *, page: int = 1, limit: int = 20) -> tuple[list[Share], int]:
        """Internal shares that name the user as a recipient."""
        received = select(ShareRecipient.share_id).where(ShareRecipient.user_id == user_id)
        conditions = [Share.id.in_(received), Share.share_type == ShareType.INTERNAL]
        return await self._page(conditions, page, limit)

    async def get_trending_shares(
        self,
        timeframe_days: int = 7,
        limit: int = 20,
        target_type: TargetType | str | None = None,
    ) -> list[dict]:
        """Most shared targets in the trailing window.

        Score is ``2 * share_count + total_clicks``; ties go to the target
        shared most recently.
        """
        since = utcnow() - timedelta(days=timeframe_days)
        conditions = [Share.created_at >= since, Share.is_public.is_(True)]
        if target_type is not None:
            conditions.append(Share.target_type == check_target_type(target_type, SHARE_TARGETS))

        share_count = func.count(Share.id)
        total_clicks = func.coalesce(func.sum(Share.click_count), 0)
        score = (share_count * 2 + total_clicks).label("score")
        last_shared = func.max(Share.created_at).label("last_shared_at")
        result = await self.db.execute(
            select(Share.target_type, Share.target_id, share_count, total_clicks, score, last_shared)
            .where(*conditions)
            .group_by(Share.target_type, Share.target_id)
            .order_by(desc(score), desc(last_shared))
            .limit(limit)
        )
        rows = result.all()
        summaries = await describe_targets(self.db, [(TargetType(r[0]), r[1]) for r in rows])
        return [
            {
                "target_type": TargetType(tt),
                "target_id": tid,
                "share_count": count,
                "total_clicks": int(clicks),
                "trending_score": int(trend),
                "last_shared_at": last,
                "target": summaries.get((TargetType(tt), tid)),
            }
            for tt, tid, count, clicks, trend, last in rows
        ]

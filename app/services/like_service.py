"""Like toggling and like queries."""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictError
from app.models.engagement import Like
from app.models.enums import LIKE_TARGETS, TargetType
from app.schemas.like import LikeResponse
from app.schemas.user import UserSummary
from app.services import counters
from app.services.targets import check_target_type, require_target, target_owner_id

logger = logging.getLogger(__name__)


@dataclass
class LikeToggleResult:
    liked: bool
    like_count: int


def like_to_response(like: Like, target: dict | None = None) -> LikeResponse:
    """Build API response from a Like (user must be loaded)."""
    return LikeResponse(
        id=like.id,
        user_id=like.user_id,
        target_type=like.target_type,
        target_id=like.target_id,
        created_at=like.created_at,
        user=UserSummary.model_validate(like.user) if like.user else None,
        target=target,
    )


class LikeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, user_id: UUID, target_type: TargetType, target_id: UUID) -> Like | None:
        result = await self.db.execute(
            select(Like).where(
                Like.user_id == user_id,
                Like.target_type == target_type,
                Like.target_id == target_id,
            )
        )
        return result.scalar_one_or_none()

    async def toggle_like(self, user_id: UUID, target_type: TargetType | str, target_id: UUID) -> LikeToggleResult:
        """Like the target if the user has not, unlike it otherwise."""
        target_type = check_target_type(target_type, LIKE_TARGETS)
        target = await require_target(self.db, target_type, target_id)
        owner_id = target_owner_id(target)

        existing = await self._find(user_id, target_type, target_id)
        if existing is not None:
            await self.db.delete(existing)
            liked = False
        else:
            self.db.add(Like(user_id=user_id, target_type=target_type, target_id=target_id))
            try:
                await self.db.flush()
            except IntegrityError:
                # A concurrent request inserted the same like first
                logger.warning("Duplicate like for user %s on %s %s, treating as liked", user_id, target_type.value, target_id)
                await self.db.rollback()
                if await self._find(user_id, target_type, target_id) is None:
                    raise ConflictError("Like could not be recorded, please retry") from None
            liked = True

        like_count = await counters.recompute_like_count(self.db, target_type, target_id)
        if owner_id is not None:
            await counters.recompute_likes_received(self.db, owner_id)
        logger.info("User %s %s %s %s", user_id, "liked" if liked else "unliked", target_type.value, target_id)
        return LikeToggleResult(liked=liked, like_count=like_count)

    async def is_liked_by_user(self, user_id: UUID, target_type: TargetType, target_id: UUID) -> bool:
        return await self._find(user_id, target_type, target_id) is not None

    async def get_like_count(self, target_type: TargetType, target_id: UUID) -> int:
        return await self.db.scalar(
            select(func.count(Like.id)).where(Like.target_type == target_type, Like.target_id == target_id)
        ) or 0

    async def get_likers(self, target_type: TargetType | str, target_id: UUID, limit: int = 10) -> list[Like]:
        """Most recent likes on a target, with the liking user loaded."""
        target_type = check_target_type(target_type, LIKE_TARGETS)
        result = await self.db.execute(
            select(Like)
            .where(Like.target_type == target_type, Like.target_id == target_id)
            .order_by(desc(Like.created_at))
            .limit(limit)
            .options(selectinload(Like.user))
        )
        return list(result.scalars().all())

    async def get_user_likes(
        self,
        user_id: UUID,
        target_type: TargetType | None = None,
        *,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Like], int]:
        conditions = [Like.user_id == user_id]
        if target_type is not None:
            conditions.append(Like.target_type == check_target_type(target_type, LIKE_TARGETS))
        total = await self.db.scalar(select(func.count(Like.id)).where(*conditions)) or 0
        result = await self.db.execute(
            select(Like)
            .where(*conditions)
            .order_by(desc(Like.created_at))
            .offset((page - 1) * limit)
            .limit(limit)
            .options(selectinload(Like.user))
        )
        return list(result.scalars().all()), total

    async def get_user_like_stats(self, user_id: UUID) -> dict[str, int]:
        result = await self.db.execute(
            select(Like.target_type, func.count(Like.id))
            .where(Like.user_id == user_id)
            .group_by(Like.target_type)
        )
        stats = {t.value: 0 for t in sorted(LIKE_TARGETS, key=lambda t: t.value)}
        stats["total"] = 0
        for target_type, count in result.all():
            stats[TargetType(target_type).value] = count
            stats["total"] += count
        return stats

    async def delete_target_likes(self, target_type: TargetType, target_id: UUID) -> int:
        """Drop every like pointing at a target that is going away."""
        result = await self.db.execute(
            delete(Like).where(Like.target_type == target_type, Like.target_id == target_id)
        )
        return result.rowcount or 0

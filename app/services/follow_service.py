"""Follow graph: toggling, listings and suggestions."""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.engagement import Follow
from app.models.enums import FollowStatus
from app.models.user import User
from app.schemas.follow import FollowResponse
from app.schemas.user import UserSummary
from app.services import counters

logger = logging.getLogger(__name__)


@dataclass
class FollowToggleResult:
    following: bool
    followers_count: int
    following_count: int


def _accepted():
    return Follow.status == FollowStatus.ACCEPTED


def follow_to_response(follow: Follow) -> FollowResponse:
    """Build API response from a Follow (both users must be loaded)."""
    return FollowResponse(
        follower_id=follow.follower_id,
        following_id=follow.following_id,
        status=follow.status,
        notifications_enabled=follow.notifications_enabled,
        created_at=follow.created_at,
        follower=UserSummary.model_validate(follow.follower) if follow.follower else None,
        following=UserSummary.model_validate(follow.following) if follow.following else None,
    )


class FollowService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, follower_id: UUID, following_id: UUID) -> Follow | None:
        result = await self.db.execute(
            select(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
        )
        return result.scalar_one_or_none()

    async def toggle_follow(self, follower_id: UUID, following_id: UUID) -> FollowToggleResult:
        """Follow the user if not already following, unfollow otherwise.

        Self-follows are rejected before any lookup, so they fail even for
        unknown ids.
        """
        if follower_id == following_id:
            raise ValidationError("Users cannot follow themselves", field="followingId")
        target = await self.db.scalar(select(User.id).where(User.id == following_id))
        if target is None:
            raise NotFoundError("User not found")

        existing = await self._find(follower_id, following_id)
        if existing is not None:
            await self.db.delete(existing)
            following = False
        else:
            self.db.add(Follow(follower_id=follower_id, following_id=following_id))
            try:
                await self.db.flush()
            except IntegrityError:
                logger.warning("Duplicate follow %s -> %s, treating as following", follower_id, following_id)
                await self.db.rollback()
                if await self._find(follower_id, following_id) is None:
                    raise ConflictError("Follow could not be recorded, please retry") from None
            following = True

        following_count, followers_count = await counters.recompute_follow_counts(
            self.db, follower_id, following_id
        )
        logger.info("User %s %s user %s", follower_id, "followed" if following else "unfollowed", following_id)
        return FollowToggleResult(
            following=following,
            followers_count=followers_count,
            following_count=following_count,
        )

    async def is_following(self, follower_id: UUID, following_id: UUID) -> bool:
        follow = await self._find(follower_id, following_id)
        return follow is not None and follow.status == FollowStatus.ACCEPTED

    async def get_followers(self, user_id: UUID, *, page: int = 1, limit: int = 20) -> tuple[list[Follow], int]:
        conditions = [Follow.following_id == user_id, _accepted()]
        total = await self.db.scalar(select(func.count()).select_from(Follow).where(*conditions)) or 0
        result = await self.db.execute(
            select(Follow)
            .where(*conditions)
            .order_by(desc(Follow.created_at))
            .offset((page - 1) * limit)
            .limit(limit)
            .options(selectinload(Follow.follower), selectinload(Follow.following))
        )
        return list(result.scalars().all()), total

    async def get_following(self, user_id: UUID, *, page: int = 1, limit: int = 20) -> tuple[list[Follow], int]:
        conditions = [Follow.follower_id == user_id, _accepted()]
        total = await self.db.scalar(select(func.count()).select_from(Follow).where(*conditions)) or 0
        result = await self.db.execute(
            select(Follow)
            .where(*conditions)
            .order_by(desc(Follow.created_at))
            .offset((page - 1) * limit)
            .limit(limit)
            .options(selectinload(Follow.follower), selectinload(Follow.following))
        )
        return list(result.scalars().all()), total

    async def get_follow_stats(self, user_id: UUID) -> dict[str, int]:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return {"followers_count": user.followers_count, "following_count": user.following_count}

    async def get_suggested_follows(self, user_id: UUID, limit: int = 10) -> list[tuple[User, int]]:
        """Friends-of-friends ranked by how many of the user's followees follow them.

        Anyone the user already has a follow row for (in any status) is left
        out, as is the user.
        """
        mine = aliased(Follow)
        theirs = aliased(Follow)
        already = select(Follow.following_id).where(Follow.follower_id == user_id)
        mutual = func.count(mine.following_id).label("mutual")
        result = await self.db.execute(
            select(theirs.following_id, mutual)
            .join(mine, mine.following_id == theirs.follower_id)
            .where(
                mine.follower_id == user_id,
                mine.status == FollowStatus.ACCEPTED,
                theirs.status == FollowStatus.ACCEPTED,
                theirs.following_id != user_id,
                theirs.following_id.not_in(already),
            )
            .group_by(theirs.following_id)
            .order_by(desc(mutual), theirs.following_id)
            .limit(limit)
        )
        ranked = result.all()
        if not ranked:
            return []
        users = await self.db.execute(select(User).where(User.id.in_([row[0] for row in ranked])))
        by_id = {u.id: u for u in users.scalars().all()}
        return [(by_id[candidate_id], count) for candidate_id, count in ranked if candidate_id in by_id]

    async def get_mutual_followers(self, user_a: UUID, user_b: UUID) -> list[User]:
        """Users who follow both ``user_a`` and ``user_b``."""
        a = aliased(Follow)
        b = aliased(Follow)
        result = await self.db.execute(
            select(User)
            .join(a, a.follower_id == User.id)
            .join(b, b.follower_id == User.id)
            .where(
                a.following_id == user_a,
                b.following_id == user_b,
                a.status == FollowStatus.ACCEPTED,
                b.status == FollowStatus.ACCEPTED,
            )
            .order_by(User.username)
        )
        return list(result.scalars().all())

    async def get_follow_activity(self, user_id: UUID, *, page: int = 1, limit: int = 20) -> tuple[list[Follow], int]:
        """Recent follows made by the people the user follows."""
        mine = aliased(Follow)
        followees = select(mine.following_id).where(
            mine.follower_id == user_id, mine.status == FollowStatus.ACCEPTED
        )
        conditions = [Follow.follower_id.in_(followees), _accepted()]
        total = await self.db.scalar(select(func.count()).select_from(Follow).where(*conditions)) or 0
        result = await self.db.execute(
            select(Follow)
            .where(*conditions)
            .order_by(desc(Follow.created_at))
            .offset((page - 1) * limit)
            .limit(limit)
            .options(selectinload(Follow.follower), selectinload(Follow.following))
        )
        return list(result.scalars().all()), total

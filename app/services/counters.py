"""Denormalized counter maintenance.

Every cached counter is derived by counting the live rows that reference its
owner and writing the result back, never by adjusting the stored value in
place. The per-write ``recompute_*`` functions are called by the services right
after each insert or delete; ``reconcile_counters`` sweeps whole tables and is
run periodically by the Celery worker.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.models.catalog import BookRecommendation
from app.models.comment import Comment
from app.models.engagement import Follow, Like, Share
from app.models.enums import COMMENT_TARGETS, LIKE_TARGETS, SHARE_TARGETS, FollowStatus, TargetType
from app.models.user import User
from app.services.targets import TARGET_MODELS

logger = logging.getLogger(__name__)


def visible_comments():
    """Filter for comments that count toward public totals."""
    return and_(Comment.is_public.is_(True), Comment.is_moderated.is_(False))


async def _write(db: AsyncSession, model, row_id: UUID, **values) -> None:
    await db.execute(update(model).where(model.id == row_id).values(**values))


async def recompute_like_count(db: AsyncSession, target_type: TargetType, target_id: UUID) -> int:
    await db.flush()
    count = await db.scalar(
        select(func.count(Like.id)).where(Like.target_type == target_type, Like.target_id == target_id)
    ) or 0
    await _write(db, TARGET_MODELS[target_type], target_id, like_count=count)
    return count


async def recompute_comment_count(db: AsyncSession, target_type: TargetType, target_id: UUID) -> int:
    await db.flush()
    count = await db.scalar(
        select(func.count(Comment.id)).where(
            Comment.target_type == target_type,
            Comment.target_id == target_id,
            visible_comments(),
        )
    ) or 0
    await _write(db, TARGET_MODELS[target_type], target_id, comment_count=count)
    return count


async def recompute_reply_count(db: AsyncSession, parent_id: UUID) -> int:
    await db.flush()
    count = await db.scalar(
        select(func.count(Comment.id)).where(Comment.parent_id == parent_id, visible_comments())
    ) or 0
    await _write(db, Comment, parent_id, reply_count=count)
    return count


async def recompute_share_count(db: AsyncSession, target_type: TargetType, target_id: UUID) -> int:
    await db.flush()
    count = await db.scalar(
        select(func.count(Share.id)).where(Share.target_type == target_type, Share.target_id == target_id)
    ) or 0
    await _write(db, TARGET_MODELS[target_type], target_id, share_count=count)
    return count


async def recompute_follow_counts(db: AsyncSession, follower_id: UUID, following_id: UUID) -> tuple[int, int]:
    """Refresh the follower's following_count and the followed user's followers_count.

    Returns ``(following_count, followers_count)``.
    """
    await db.flush()
    following_count = await db.scalar(
        select(func.count()).select_from(Follow).where(
            Follow.follower_id == follower_id, Follow.status == FollowStatus.ACCEPTED
        )
    ) or 0
    followers_count = await db.scalar(
        select(func.count()).select_from(Follow).where(
            Follow.following_id == following_id, Follow.status == FollowStatus.ACCEPTED
        )
    ) or 0
    await _write(db, User, follower_id, following_count=following_count)
    await _write(db, User, following_id, followers_count=followers_count)
    return following_count, followers_count


async def recompute_likes_received(db: AsyncSession, owner_id: UUID) -> int:
    """Total likes on everything the user authored (recommendations, reviews, comments)."""
    await db.flush()
    total = 0
    for target_type in LIKE_TARGETS:
        model = TARGET_MODELS[target_type]
        total += await db.scalar(
            select(func.count(Like.id))
            .join(model, model.id == Like.target_id)
            .where(Like.target_type == target_type, model.user_id == owner_id)
        ) or 0
    await _write(db, User, owner_id, likes_received_count=total)
    return total


# ---------------------------------------------------------------------------
# Table-wide reconciliation
# ---------------------------------------------------------------------------

@dataclass
class CounterDrift:
    table: str
    row_id: UUID
    column: str
    cached: int
    live: int


def _counter_definitions() -> list[tuple[type, str, object]]:
    """(model, counter column, correlated live-count subquery) for every cached counter."""
    defs = []
    for target_type in sorted(LIKE_TARGETS, key=lambda t: t.value):
        model = TARGET_MODELS[target_type]
        live = (
            select(func.count(Like.id))
            .where(Like.target_type == target_type, Like.target_id == model.id)
            .correlate(model)
            .scalar_subquery()
        )
        defs.append((model, "like_count", live))

    for target_type in sorted(COMMENT_TARGETS, key=lambda t: t.value):
        model = TARGET_MODELS[target_type]
        live = (
            select(func.count(Comment.id))
            .where(Comment.target_type == target_type, Comment.target_id == model.id, visible_comments())
            .correlate(model)
            .scalar_subquery()
        )
        defs.append((model, "comment_count", live))

    for target_type in sorted(SHARE_TARGETS, key=lambda t: t.value):
        model = TARGET_MODELS[target_type]
        live = (
            select(func.count(Share.id))
            .where(Share.target_type == target_type, Share.target_id == model.id)
            .correlate(model)
            .scalar_subquery()
        )
        defs.append((model, "share_count", live))

    reply = aliased(Comment)
    defs.append((
        Comment,
        "reply_count",
        select(func.count(reply.id))
        .where(reply.parent_id == Comment.id, reply.is_public.is_(True), reply.is_moderated.is_(False))
        .correlate(Comment)
        .scalar_subquery(),
    ))

    defs.append((
        User,
        "followers_count",
        select(func.count())
        .select_from(Follow)
        .where(Follow.following_id == User.id, Follow.status == FollowStatus.ACCEPTED)
        .correlate(User)
        .scalar_subquery(),
    ))
    defs.append((
        User,
        "following_count",
        select(func.count())
        .select_from(Follow)
        .where(Follow.follower_id == User.id, Follow.status == FollowStatus.ACCEPTED)
        .correlate(User)
        .scalar_subquery(),
    ))
    defs.append((
        User,
        "recommendations_count",
        select(func.count(BookRecommendation.id))
        .where(BookRecommendation.user_id == User.id)
        .correlate(User)
        .scalar_subquery(),
    ))

    received = None
    for target_type in sorted(LIKE_TARGETS, key=lambda t: t.value):
        model = TARGET_MODELS[target_type]
        part = (
            select(func.count(Like.id))
            .join(model, model.id == Like.target_id)
            .where(Like.target_type == target_type, model.user_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        received = part if received is None else received + part
    defs.append((User, "likes_received_count", received))
    return defs


async def find_counter_drift(db: AsyncSession) -> list[CounterDrift]:
    """Rows whose cached counter differs from the live count."""
    drift = []
    for model, column_name, live in _counter_definitions():
        column = getattr(model, column_name)
        result = await db.execute(select(model.id, column, live).where(column != live))
        for row_id, cached, live_value in result.all():
            drift.append(CounterDrift(model.__tablename__, row_id, column_name, cached or 0, live_value or 0))
    return drift


async def reconcile_counters(db: AsyncSession) -> dict[str, int]:
    """Rewrite every drifted counter from its live count. Returns corrected rows per counter."""
    corrected = {}
    for model, column_name, live in _counter_definitions():
        column = getattr(model, column_name)
        stmt = (
            update(model)
            .where(column != live)
            .values({column_name: live})
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        key = f"{model.__tablename__}.{column_name}"
        corrected[key] = corrected.get(key, 0) + (result.rowcount or 0)
    fixed = sum(corrected.values())
    if fixed:
        logger.warning("Reconciled %d drifted counters: %s", fixed, {k: v for k, v in corrected.items() if v})
    else:
        logger.info("Counter reconciliation found no drift")
    return corrected

"""Comment business logic: posting, replies, moderation and listings."""
import logging
from uuid import UUID

from sqlalchemy import asc, desc, exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from app.core.config import settings
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.models.comment import Comment
from app.models.enums import COMMENT_TARGETS, TargetType
from app.schemas.comment import COMMENT_MAX_LENGTH, CommentResponse
from app.schemas.user import UserSummary
from app.services import counters
from app.services.like_service import LikeService
from app.services.targets import check_target_type, require_target

logger = logging.getLogger(__name__)

KEYWORD_MODERATION_REASON = "Contains inappropriate content"
REPORT_MODERATION_REASON = "Auto-moderated due to multiple reports"

SORT_COLUMNS = {
    "createdAt": Comment.created_at,
    "likeCount": Comment.like_count,
    "replyCount": Comment.reply_count,
}


def comment_to_response(comment: Comment) -> CommentResponse:
    """Build API response from a Comment (user must be loaded if present)."""
    return CommentResponse(
        id=comment.id,
        user_id=comment.user_id,
        target_type=comment.target_type,
        target_id=comment.target_id,
        text=comment.text,
        parent_comment_id=comment.parent_id,
        reply_count=comment.reply_count or 0,
        like_count=comment.like_count or 0,
        is_public=comment.is_public,
        is_moderated=comment.is_moderated,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        user=UserSummary.model_validate(comment.user) if comment.user else None,
    )


class CommentService:
    def __init__(
        self,
        db: AsyncSession,
        report_threshold: int | None = None,
        denylist: list[str] | None = None,
    ):
        self.db = db
        self.report_threshold = (
            report_threshold if report_threshold is not None else settings.COMMENT_REPORT_THRESHOLD
        )
        self.denylist = [w.lower() for w in (denylist if denylist is not None else settings.COMMENT_DENYLIST)]

    def contains_blocked_word(self, text: str) -> bool:
        lowered = text.lower()
        return any(word in lowered for word in self.denylist)

    async def get_comment(self, comment_id: UUID) -> Comment | None:
        result = await self.db.execute(
            select(Comment).where(Comment.id == comment_id).options(selectinload(Comment.user))
        )
        return result.scalar_one_or_none()

    async def require_comment(self, comment_id: UUID) -> Comment:
        comment = await self.get_comment(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def _recount(self, target_type: TargetType, target_id: UUID, parent_id: UUID | None) -> None:
        await counters.recompute_comment_count(self.db, target_type, target_id)
        if parent_id is not None:
            await counters.recompute_reply_count(self.db, parent_id)

    async def add_comment(
        self,
        user_id: UUID,
        target_type: TargetType | str,
        target_id: UUID,
        text: str,
        parent_id: UUID | None = None,
    ) -> Comment:
        target_type = check_target_type(target_type, COMMENT_TARGETS)
        text = (text or "").strip()
        if not 1 <= len(text) <= COMMENT_MAX_LENGTH:
            raise ValidationError(
                f"Comment must be between 1 and {COMMENT_MAX_LENGTH} characters", field="text"
            )
        await require_target(self.db, target_type, target_id)

        if parent_id is not None:
            parent = await self.get_comment(parent_id)
            if parent is None:
                raise NotFoundError("Parent comment not found")
            if parent.target_type != target_type or parent.target_id != target_id:
                raise ValidationError("Parent comment belongs to a different target", field="parentCommentId")
            # Replies stay one level deep
            if parent.parent_id is not None:
                parent_id = parent.parent_id

        comment = Comment(
            user_id=user_id,
            target_type=target_type,
            target_id=target_id,
            text=text,
            parent_id=parent_id,
        )
        if self.contains_blocked_word(text):
            comment.is_moderated = True
            comment.moderation_reason = KEYWORD_MODERATION_REASON
            logger.info("Comment by user %s on %s %s held by keyword filter", user_id, target_type.value, target_id)
        self.db.add(comment)
        await self.db.flush()

        await self._recount(target_type, target_id, parent_id)
        return await self._reload(comment.id)

    async def _reload(self, comment_id: UUID) -> Comment:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.id == comment_id)
            .options(selectinload(Comment.user))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def report_comment(self, comment_id: UUID, reason: str | None = None) -> Comment:
        comment = await self.require_comment(comment_id)
        await self.db.execute(
            update(Comment)
            .where(Comment.id == comment_id)
            .values(report_count=Comment.report_count + 1)
            .execution_options(synchronize_session=False)
        )
        comment = await self._reload(comment_id)
        logger.info("Comment %s reported (%d reports): %s", comment_id, comment.report_count, reason or "no reason")

        if comment.report_count >= self.report_threshold and not comment.is_moderated:
            comment.is_moderated = True
            comment.moderation_reason = REPORT_MODERATION_REASON
            await self.db.flush()
            logger.info("Comment %s auto-moderated after %d reports", comment_id, comment.report_count)
            await self._recount(TargetType(comment.target_type), comment.target_id, comment.parent_id)
            comment = await self._reload(comment_id)
        return comment

    async def delete_comment(self, comment_id: UUID, requester_id: UUID) -> None:
        """Delete a comment owned by the requester; its replies are kept."""
        comment = await self.require_comment(comment_id)
        if comment.user_id != requester_id:
            raise ForbiddenError("You can only delete your own comments")
        target_type = TargetType(comment.target_type)
        target_id = comment.target_id
        parent_id = comment.parent_id
        owner_id = comment.user_id

        await LikeService(self.db).delete_target_likes(TargetType.COMMENT, comment_id)
        await self.db.delete(comment)
        await self.db.flush()

        await self._recount(target_type, target_id, parent_id)
        await counters.recompute_likes_received(self.db, owner_id)
        logger.info("Comment %s deleted by user %s", comment_id, requester_id)

    async def get_target_comments(
        self,
        target_type: TargetType | str,
        target_id: UUID,
        *,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        include_replies: bool = False,
    ) -> tuple[list[Comment], int]:
        target_type = check_target_type(target_type, COMMENT_TARGETS)
        if sort_by not in SORT_COLUMNS:
            raise ValidationError("Invalid sort field", field="sortBy")
        if sort_order not in ("asc", "desc"):
            raise ValidationError("Invalid sort order", field="sortOrder")

        conditions = [
            Comment.target_type == target_type,
            Comment.target_id == target_id,
            counters.visible_comments(),
        ]
        if include_replies:
            # orphans of a deleted parent stay reachable only through get_comment_replies
            parent = aliased(Comment)
            conditions.append(
                or_(Comment.parent_id.is_(None), exists().where(parent.id == Comment.parent_id))
            )
        else:
            conditions.append(Comment.parent_id.is_(None))

        total = await self.db.scalar(select(func.count(Comment.id)).where(*conditions)) or 0
        direction = desc if sort_order == "desc" else asc
        result = await self.db.execute(
            select(Comment)
            .where(*conditions)
            .order_by(direction(SORT_COLUMNS[sort_by]), direction(Comment.created_at), Comment.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .options(selectinload(Comment.user))
        )
        return list(result.scalars().all()), total

    async def get_comment_replies(
        self,
        parent_id: UUID,
        *,
        page: int = 1,
        limit: int = 10,
        sort_order: str = "asc",
    ) -> tuple[list[Comment], int]:
        """Visible replies of a comment, oldest first by default.

        The parent need not exist any more: replies of a deleted comment stay
        reachable here.
        """
        conditions = [Comment.parent_id == parent_id, counters.visible_comments()]
        total = await self.db.scalar(select(func.count(Comment.id)).where(*conditions)) or 0
        direction = desc if sort_order == "desc" else asc
        result = await self.db.execute(
            select(Comment)
            .where(*conditions)
            .order_by(direction(Comment.created_at), Comment.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .options(selectinload(Comment.user))
        )
        return list(result.scalars().all()), total

    async def get_user_comments(self, user_id: UUID, *, page: int = 1, limit: int = 20) -> tuple[list[Comment], int]:
        conditions = [Comment.user_id == user_id]
        total = await self.db.scalar(select(func.count(Comment.id)).where(*conditions)) or 0
        result = await self.db.execute(
            select(Comment)
            .where(*conditions)
            .order_by(desc(Comment.created_at))
            .offset((page - 1) * limit)
            .limit(limit)
            .options(selectinload(Comment.user))
        )
        return list(result.scalars().all()), total

    async def get_comment_stats(self, target_type: TargetType | str, target_id: UUID) -> dict[str, int]:
        target_type = check_target_type(target_type, COMMENT_TARGETS)
        row = (
            await self.db.execute(
                select(func.count(Comment.id), func.coalesce(func.sum(Comment.like_count), 0)).where(
                    Comment.target_type == target_type,
                    Comment.target_id == target_id,
                    counters.visible_comments(),
                )
            )
        ).one()
        return {"total_comments": row[0] or 0, "total_likes": int(row[1] or 0)}

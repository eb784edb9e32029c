"""Polymorphic target resolution.

An engagement points at ``(target_type, target_id)``. ``TARGET_MODELS`` maps each
kind to the table holding it; every feature restricts the kinds it accepts.
"""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.models.catalog import Book, BookRecommendation, Review
from app.models.comment import Comment
from app.models.enums import TargetType

TARGET_MODELS = {
    TargetType.RECOMMENDATION: BookRecommendation,
    TargetType.REVIEW: Review,
    TargetType.COMMENT: Comment,
    TargetType.BOOK: Book,
}

_TARGET_LABELS = {
    TargetType.RECOMMENDATION: "Recommendation",
    TargetType.REVIEW: "Review",
    TargetType.COMMENT: "Comment",
    TargetType.BOOK: "Book",
}


def check_target_type(target_type: TargetType | str, allowed: frozenset[TargetType]) -> TargetType:
    """Coerce and validate a target kind against the kinds a feature accepts."""
    try:
        kind = TargetType(target_type)
    except ValueError:
        raise ValidationError("Invalid target type", field="targetType") from None
    if kind not in allowed:
        raise ValidationError("Invalid target type", field="targetType")
    return kind


async def get_target(db: AsyncSession, target_type: TargetType, target_id: UUID):
    model = TARGET_MODELS[target_type]
    result = await db.execute(select(model).where(model.id == target_id))
    return result.scalar_one_or_none()


async def require_target(db: AsyncSession, target_type: TargetType, target_id: UUID):
    target = await get_target(db, target_type, target_id)
    if target is None:
        raise NotFoundError(f"{_TARGET_LABELS[target_type]} not found")
    return target


def target_owner_id(target) -> UUID | None:
    """Author of a target, if the kind has one (books do not)."""
    return getattr(target, "user_id", None)


def describe_target(target_type: TargetType, target) -> dict:
    """Short summary used where listings embed the target."""
    if target_type is TargetType.RECOMMENDATION:
        title = f"{target.title} by {target.author}"
    elif target_type is TargetType.BOOK:
        title = target.title
    elif target_type is TargetType.COMMENT:
        title = target.excerpt
    else:
        title = target.text if len(target.text) <= 100 else target.text[:97] + "..."
    return {"id": target.id, "type": target_type.value, "title": title}


async def describe_targets(db: AsyncSession, keys: list[tuple[TargetType, UUID]]) -> dict[tuple[TargetType, UUID], dict]:
    """Batch-load summaries for many targets, one query per kind."""
    by_type: dict[TargetType, set[UUID]] = {}
    for target_type, target_id in keys:
        by_type.setdefault(target_type, set()).add(target_id)
    summaries = {}
    for target_type, ids in by_type.items():
        model = TARGET_MODELS[target_type]
        result = await db.execute(select(model).where(model.id.in_(ids)))
        for target in result.scalars().all():
            summaries[(target_type, target.id)] = describe_target(target_type, target)
    return summaries

"""Enumerations shared by models, schemas and services."""
from enum import Enum

import sqlalchemy as sa


class TargetType(str, Enum):
    """Kinds of document an engagement can point at."""
    RECOMMENDATION = "recommendation"
    REVIEW = "review"
    COMMENT = "comment"
    BOOK = "book"


LIKE_TARGETS = frozenset({TargetType.RECOMMENDATION, TargetType.COMMENT, TargetType.REVIEW})
COMMENT_TARGETS = frozenset({TargetType.RECOMMENDATION, TargetType.REVIEW})
SHARE_TARGETS = frozenset({TargetType.RECOMMENDATION, TargetType.REVIEW, TargetType.BOOK})


class FollowStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    BLOCKED = "blocked"


class ShareType(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    SOCIAL = "social"


class SharePlatform(str, Enum):
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    LINKEDIN = "linkedin"
    EMAIL = "email"
    COPY_LINK = "copy_link"
    INTERNAL_FEED = "internal_feed"


EXTERNAL_PLATFORMS = frozenset({
    SharePlatform.TWITTER,
    SharePlatform.FACEBOOK,
    SharePlatform.LINKEDIN,
    SharePlatform.EMAIL,
    SharePlatform.COPY_LINK,
})


def enum_column(enum_cls: type[Enum]) -> sa.Enum:
    """VARCHAR-backed enum storing member values, so no native type needs migrating."""
    return sa.Enum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )

"""Engagement models: Like, Follow, Share (polymorphic targets)."""
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship

from app.db.session import Base, utcnow
from app.models.enums import FollowStatus, SharePlatform, ShareType, TargetType, enum_column


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "target_type", "target_id", name="uq_likes_user_target"),
        Index("ix_likes_target_created", "target_type", "target_id", "created_at"),
        Index("ix_likes_user_created", "user_id", "created_at"),
    )

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    target_type = Column(enum_column(TargetType), nullable=False)
    # Points to book_recommendations.id, reviews.id or comments.id - no FK enforced
    target_id = Column(PG_UUID(as_uuid=True), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")


class Follow(Base):
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follows_follower_following"),
        CheckConstraint("follower_id <> following_id", name="ck_follows_not_self"),
        Index("ix_follows_following_status", "following_id", "status", "created_at"),
        Index("ix_follows_follower_status", "follower_id", "status", "created_at"),
    )

    follower_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    following_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    # No approval flow yet: rows are created accepted
    status = Column(enum_column(FollowStatus), nullable=False, default=FollowStatus.ACCEPTED)
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    follower = relationship("User", foreign_keys=[follower_id])
    following = relationship("User", foreign_keys=[following_id])


class Share(Base):
    """A single share action. Repeated shares of one target are separate rows."""
    __tablename__ = "shares"
    __table_args__ = (
        Index("ix_shares_target_created", "target_type", "target_id", "created_at"),
        Index("ix_shares_user_type_created", "user_id", "share_type", "created_at"),
        Index("ix_shares_platform_created", "platform", "created_at"),
    )

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    target_type = Column(enum_column(TargetType), nullable=False)
    target_id = Column(PG_UUID(as_uuid=True), nullable=False)
    share_type = Column(enum_column(ShareType), nullable=False, default=ShareType.INTERNAL)
    platform = Column(enum_column(SharePlatform), nullable=True)
    message = Column(Text, nullable=True)
    click_count = Column(Integer, default=0, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")
    recipients = relationship("ShareRecipient", back_populates="share", cascade="all, delete-orphan")


class ShareRecipient(Base):
    """Recipient of an internal share; backs the "received shares" inbox."""
    __tablename__ = "share_recipients"

    share_id = Column(PG_UUID(as_uuid=True), ForeignKey("shares.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=utcnow)

    share = relationship("Share", back_populates="recipients")

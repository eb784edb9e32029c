"""Comment model (unified for recommendations and reviews, with one level of replies)."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship

from app.db.session import Base, utcnow
from app.models.enums import TargetType, enum_column


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_target_created", "target_type", "target_id", "created_at"),
        Index("ix_comments_parent_created", "parent_id", "created_at"),
        Index("ix_comments_visibility", "is_public", "is_moderated"),
    )

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    target_type = Column(enum_column(TargetType), nullable=False)
    target_id = Column(PG_UUID(as_uuid=True), nullable=False)
    # Soft reference: replies survive their parent's deletion
    parent_id = Column(PG_UUID(as_uuid=True), nullable=True)
    text = Column(Text, nullable=False)
    reply_count = Column(Integer, default=0, nullable=False)
    like_count = Column(Integer, default=0, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    is_moderated = Column(Boolean, default=False, nullable=False)
    moderation_reason = Column(String(255), nullable=True)
    report_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")

    @property
    def excerpt(self) -> str:
        if len(self.text) <= 100:
            return self.text
        return self.text[:97] + "..."

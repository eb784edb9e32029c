"""Owning entities the social layer points at: recommendations, reviews, books.

Their authoring CRUD lives outside this service; here they only carry the
cached engagement counters.
"""
import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID

from app.db.session import Base, utcnow


class Book(Base):
    __tablename__ = "books"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    google_books_id = Column(String(64), unique=True, nullable=False, index=True)
    title = Column(String(500), nullable=False)
    authors = Column(JSON, nullable=True)  # list of author names
    share_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class BookRecommendation(Base):
    __tablename__ = "book_recommendations"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    author = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    genre = Column(String(50), nullable=True)
    rating = Column(Integer, nullable=True)  # 1..5
    is_public = Column(Boolean, default=True, nullable=False)
    like_count = Column(Integer, default=0, nullable=False)
    comment_count = Column(Integer, default=0, nullable=False)
    share_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class Review(Base):
    __tablename__ = "reviews"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    book_id = Column(PG_UUID(as_uuid=True), ForeignKey("books.id", ondelete="CASCADE"), nullable=True, index=True)
    text = Column(Text, nullable=False)
    rating = Column(Integer, nullable=True)
    is_public = Column(Boolean, default=True, nullable=False)
    is_moderated = Column(Boolean, default=False, nullable=False)
    like_count = Column(Integer, default=0, nullable=False)
    comment_count = Column(Integer, default=0, nullable=False)
    share_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

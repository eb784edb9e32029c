"""SQLAlchemy declarative base and model imports for Alembic."""
from app.db.session import Base  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.catalog import Book, BookRecommendation, Review  # noqa: F401
from app.models.comment import Comment  # noqa: F401
from app.models.engagement import Follow, Like, Share, ShareRecipient  # noqa: F401

__all__ = ["Base", "User", "Book", "BookRecommendation", "Review", "Comment", "Follow", "Like", "Share", "ShareRecipient"]

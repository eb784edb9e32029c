from app.models.user import User
from app.models.catalog import Book, BookRecommendation, Review
from app.models.comment import Comment
from app.models.engagement import Follow, Like, Share, ShareRecipient

__all__ = ["User", "Book", "BookRecommendation", "Review", "Comment", "Follow", "Like", "Share", "ShareRecipient"]

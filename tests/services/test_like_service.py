"""
Tests for LikeService.

These tests verify toggle semantics, target validation and that the cached
like counters always equal the live like rows.
"""

import uuid

import pytest
from sqlalchemy import func, select

from app.core.exceptions import NotFoundError, ValidationError
from app.models.catalog import BookRecommendation
from app.models.engagement import Like
from app.models.enums import TargetType
from app.services.comment_service import CommentService
from app.services.like_service import LikeService


async def live_like_count(db, target_type, target_id) -> int:
    return await db.scalar(
        select(func.count(Like.id)).where(Like.target_type == target_type, Like.target_id == target_id)
    )


class TestToggleLike:
    """Tests for LikeService.toggle_like."""

    async def test_first_toggle_likes(self, db, alice, bob, make_recommendation):
        rec = await make_recommendation(alice)
        service = LikeService(db)

        result = await service.toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)

        assert result.liked is True
        assert result.like_count == 1
        await db.refresh(rec)
        assert rec.like_count == 1

    async def test_second_toggle_unlikes(self, db, alice, bob, make_recommendation):
        rec = await make_recommendation(alice)
        service = LikeService(db)

        await service.toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)
        result = await service.toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)

        assert result.liked is False
        assert result.like_count == 0
        assert await service.is_liked_by_user(bob.id, TargetType.RECOMMENDATION, rec.id) is False

    async def test_count_matches_live_rows_after_toggle_sequence(self, db, make_user, alice, make_recommendation):
        rec = await make_recommendation(alice)
        users = [await make_user() for _ in range(4)]
        service = LikeService(db)

        # u0 likes, u1 likes, u2 likes, u1 unlikes, u3 likes, u0 unlikes, u0 likes
        for idx in (0, 1, 2, 1, 3, 0, 0):
            result = await service.toggle_like(users[idx].id, TargetType.RECOMMENDATION, rec.id)
            assert result.like_count == await live_like_count(db, TargetType.RECOMMENDATION, rec.id)

        await db.refresh(rec)
        assert rec.like_count == 3

    async def test_string_target_type_is_accepted(self, db, alice, bob, make_review):
        review = await make_review(alice)

        result = await LikeService(db).toggle_like(bob.id, "review", review.id)

        assert result.liked is True
        await db.refresh(review)
        assert review.like_count == 1

    async def test_book_is_not_likeable(self, db, alice, make_book):
        book = await make_book()

        with pytest.raises(ValidationError) as exc_info:
            await LikeService(db).toggle_like(alice.id, TargetType.BOOK, book.id)
        assert exc_info.value.errors[0]["field"] == "targetType"

    async def test_unknown_target_type_is_rejected(self, db, alice):
        with pytest.raises(ValidationError):
            await LikeService(db).toggle_like(alice.id, "shelf", uuid.uuid4())

    async def test_missing_target_is_not_found(self, db, alice):
        with pytest.raises(NotFoundError) as exc_info:
            await LikeService(db).toggle_like(alice.id, TargetType.RECOMMENDATION, uuid.uuid4())
        assert exc_info.value.message == "Recommendation not found"

    async def test_likes_received_tracks_author(self, db, alice, bob, carol, make_recommendation, make_review):
        rec = await make_recommendation(alice)
        review = await make_review(alice)
        service = LikeService(db)

        await service.toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)
        await service.toggle_like(carol.id, TargetType.RECOMMENDATION, rec.id)
        await service.toggle_like(bob.id, TargetType.REVIEW, review.id)
        await db.refresh(alice)
        assert alice.likes_received_count == 3

        await service.toggle_like(carol.id, TargetType.RECOMMENDATION, rec.id)
        await db.refresh(alice)
        assert alice.likes_received_count == 2

    async def test_comment_like_updates_comment_counter(self, db, alice, bob, make_recommendation):
        rec = await make_recommendation(alice)
        comment = await CommentService(db).add_comment(bob.id, TargetType.RECOMMENDATION, rec.id, "Loved it")

        result = await LikeService(db).toggle_like(alice.id, TargetType.COMMENT, comment.id)

        assert result.like_count == 1
        await db.refresh(comment)
        assert comment.like_count == 1
        await db.refresh(bob)
        assert bob.likes_received_count == 1


    async def test_duplicate_insert_resolves_as_liked(
        self, db, session_maker, alice, bob, make_recommendation, monkeypatch
    ):
        rec = await make_recommendation(alice)
        rec_id, bob_id = rec.id, bob.id
        # another request already committed the same like
        async with session_maker() as other:
            other.add(Like(user_id=bob_id, target_type=TargetType.RECOMMENDATION, target_id=rec_id))
            await other.commit()

        service = LikeService(db)
        real_find = service._find
        lookups = []

        async def find_before_commit(*args):
            lookups.append(args)
            if len(lookups) == 1:
                return None
            return await real_find(*args)

        monkeypatch.setattr(service, "_find", find_before_commit)
        result = await service.toggle_like(bob_id, TargetType.RECOMMENDATION, rec_id)

        assert result.liked is True
        assert result.like_count == 1
        assert len(lookups) == 2
        assert await live_like_count(db, TargetType.RECOMMENDATION, rec_id) == 1
        cached = await db.scalar(select(BookRecommendation.like_count).where(BookRecommendation.id == rec_id))
        assert cached == 1

class TestLikeQueries:
    """Tests for the read side of LikeService."""

    async def test_get_likers_includes_user(self, db, alice, bob, carol, make_recommendation):
        rec = await make_recommendation(alice)
        service = LikeService(db)
        await service.toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)
        await service.toggle_like(carol.id, TargetType.RECOMMENDATION, rec.id)

        likers = await service.get_likers(TargetType.RECOMMENDATION, rec.id)

        assert {like.user.username for like in likers} == {"bob", "carol"}
        assert await service.get_like_count(TargetType.RECOMMENDATION, rec.id) == 2

    async def test_get_likers_respects_limit(self, db, make_user, alice, make_recommendation):
        rec = await make_recommendation(alice)
        service = LikeService(db)
        for _ in range(3):
            user = await make_user()
            await service.toggle_like(user.id, TargetType.RECOMMENDATION, rec.id)

        likers = await service.get_likers(TargetType.RECOMMENDATION, rec.id, limit=2)

        assert len(likers) == 2

    async def test_get_user_likes_filters_and_paginates(self, db, alice, bob, make_recommendation, make_review):
        service = LikeService(db)
        for i in range(3):
            rec = await make_recommendation(alice, title=f"Book {i}")
            await service.toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)
        review = await make_review(alice)
        await service.toggle_like(bob.id, TargetType.REVIEW, review.id)

        likes, total = await service.get_user_likes(bob.id, page=1, limit=2)
        assert total == 4
        assert len(likes) == 2

        likes, total = await service.get_user_likes(bob.id, TargetType.REVIEW)
        assert total == 1
        assert likes[0].target_id == review.id

    async def test_user_like_stats(self, db, alice, bob, make_recommendation, make_review):
        service = LikeService(db)
        rec = await make_recommendation(alice)
        review = await make_review(alice)
        await service.toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)
        await service.toggle_like(bob.id, TargetType.REVIEW, review.id)

        stats = await service.get_user_like_stats(bob.id)

        assert stats == {"comment": 0, "recommendation": 1, "review": 1, "total": 2}

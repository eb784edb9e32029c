"""
Tests for counter recomputation and table-wide reconciliation.
"""

import uuid

from sqlalchemy import update

from app.models.catalog import BookRecommendation
from app.models.comment import Comment
from app.models.enums import TargetType
from app.models.user import User
from app.services import counters
from app.services.comment_service import CommentService
from app.services.follow_service import FollowService
from app.services.like_service import LikeService


class TestRecompute:
    """Tests for the per-write recompute functions."""

    async def test_recompute_overwrites_stale_value(self, db, alice, bob, make_recommendation):
        rec = await make_recommendation(alice)
        await LikeService(db).toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)
        await db.execute(update(BookRecommendation).where(BookRecommendation.id == rec.id).values(like_count=42))

        assert await counters.recompute_like_count(db, TargetType.RECOMMENDATION, rec.id) == 1
        await db.refresh(rec)
        assert rec.like_count == 1

    async def test_missing_target_is_a_noop(self, db):
        assert await counters.recompute_like_count(db, TargetType.REVIEW, uuid.uuid4()) == 0
        assert await counters.recompute_reply_count(db, uuid.uuid4()) == 0

    async def test_recommendations_count_is_reconciled(self, db, alice, make_recommendation):
        await make_recommendation(alice, title="One")
        await make_recommendation(alice, title="Two")

        corrected = await counters.reconcile_counters(db)

        assert corrected["users.recommendations_count"] == 1
        await db.refresh(alice)
        assert alice.recommendations_count == 2


class TestReconcile:
    """Tests for find_counter_drift and reconcile_counters."""

    async def test_no_drift_after_service_writes(self, db, alice, bob, carol, make_recommendation):
        rec = await make_recommendation(alice)
        await db.execute(update(User).where(User.id == alice.id).values(recommendations_count=1))
        comments = CommentService(db)
        root = await comments.add_comment(bob.id, TargetType.RECOMMENDATION, rec.id, "Root")
        await comments.add_comment(carol.id, TargetType.RECOMMENDATION, rec.id, "Reply", parent_id=root.id)
        await LikeService(db).toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)
        await LikeService(db).toggle_like(alice.id, TargetType.COMMENT, root.id)
        await FollowService(db).toggle_follow(bob.id, alice.id)

        assert await counters.find_counter_drift(db) == []

    async def test_drift_is_found_and_fixed(self, db, alice, bob, make_recommendation):
        rec = await make_recommendation(alice)
        await db.execute(update(User).where(User.id == alice.id).values(recommendations_count=1))
        comment = await CommentService(db).add_comment(bob.id, TargetType.RECOMMENDATION, rec.id, "Hi")
        await LikeService(db).toggle_like(bob.id, TargetType.RECOMMENDATION, rec.id)
        await db.execute(update(BookRecommendation).where(BookRecommendation.id == rec.id).values(like_count=7))
        await db.execute(update(Comment).where(Comment.id == comment.id).values(reply_count=3))
        await db.execute(update(User).where(User.id == alice.id).values(likes_received_count=0))

        drift = await counters.find_counter_drift(db)

        found = {(d.table, d.column): (d.cached, d.live) for d in drift}
        assert found == {
            ("book_recommendations", "like_count"): (7, 1),
            ("comments", "reply_count"): (3, 0),
            ("users", "likes_received_count"): (0, 1),
        }

        corrected = await counters.reconcile_counters(db)

        assert corrected["book_recommendations.like_count"] == 1
        assert corrected["comments.reply_count"] == 1
        assert corrected["users.likes_received_count"] == 1
        assert await counters.find_counter_drift(db) == []
        await db.refresh(rec)
        assert rec.like_count == 1
